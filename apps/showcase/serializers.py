from rest_framework import serializers

from common.mixins import TenantMixin
from .models import PortfolioItem, ShowcaseService, TeamMember, Testimonial


class PortfolioItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = PortfolioItem
        fields = [
            'id', 'clinic_id', 'title', 'category', 'description',
            'before_image_url', 'after_image_url', 'is_published',
            'display_order', 'created_at'
        ]
        read_only_fields = ['id', 'clinic_id', 'created_at']


class TestimonialSerializer(serializers.ModelSerializer):
    class Meta:
        model = Testimonial
        fields = [
            'id', 'clinic_id', 'patient_name', 'patient_photo_url', 'content',
            'rating', 'treatment_type', 'is_approved', 'is_published', 'created_at'
        ]
        read_only_fields = ['id', 'clinic_id', 'created_at']


class TestimonialModerationSerializer(serializers.Serializer):
    is_approved = serializers.BooleanField(required=False)
    is_published = serializers.BooleanField(required=False)

    def validate(self, data):
        if not data:
            raise serializers.ValidationError('Provide is_approved and/or is_published')
        return data


class ShowcaseServiceSerializer(serializers.ModelSerializer):
    benefits = serializers.ListField(child=serializers.CharField(max_length=200), required=False)

    class Meta:
        model = ShowcaseService
        fields = [
            'id', 'clinic_id', 'name', 'description', 'benefits', 'price_range',
            'duration', 'image_url', 'is_active', 'display_order', 'created_at'
        ]
        read_only_fields = ['id', 'clinic_id', 'created_at']


class TeamMemberSerializer(TenantMixin, serializers.ModelSerializer):
    qualifications = serializers.ListField(child=serializers.CharField(max_length=200), required=False)

    class Meta:
        model = TeamMember
        fields = [
            'id', 'clinic_id', 'profile', 'name', 'title', 'specialization',
            'qualifications', 'bio', 'photo_url', 'display_order', 'is_active',
            'created_at'
        ]
        read_only_fields = ['id', 'clinic_id', 'created_at']
