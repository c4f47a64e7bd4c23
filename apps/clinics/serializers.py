# clinics/serializers.py
from rest_framework import serializers

from .models import AppRole, Clinic, Profile, UserRole


class ClinicSerializer(serializers.ModelSerializer):
    class Meta:
        model = Clinic
        fields = [
            'id', 'name', 'slug', 'clinic_type', 'logo_url', 'primary_color',
            'phone', 'email', 'address', 'is_active', 'subscription_status',
            'subscription_ends_at', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class ProfileSerializer(serializers.ModelSerializer):
    full_name = serializers.ReadOnlyField()

    class Meta:
        model = Profile
        fields = [
            'id', 'user_id', 'clinic_id', 'first_name', 'last_name', 'full_name',
            'avatar_url', 'phone', 'email', 'specialization', 'bio', 'is_active',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class UserRoleSerializer(serializers.ModelSerializer):
    class Meta:
        model = UserRole
        fields = ['id', 'user_id', 'role', 'clinic_id', 'created_at']
        read_only_fields = fields


class TeamMemberSerializer(serializers.ModelSerializer):
    """Profile of a clinic member with the roles held in that clinic."""
    roles = serializers.SerializerMethodField()

    class Meta:
        model = Profile
        fields = [
            'id', 'user_id', 'first_name', 'last_name', 'email', 'avatar_url', 'roles'
        ]

    def get_roles(self, obj):
        return [
            {'id': str(role.id), 'role': role.role}
            for role in getattr(obj, 'clinic_roles', [])
        ]


class AssignRoleSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    role = serializers.ChoiceField(choices=AppRole.choices)
