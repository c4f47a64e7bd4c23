from rest_framework import serializers

from apps.clinics.models import Profile
from apps.patients.models import Patient
from apps.patients.serializers import PatientListSerializer
from common.mixins import TenantMixin
from .models import Appointment, AppointmentStatus


class ProviderSummarySerializer(serializers.ModelSerializer):
    full_name = serializers.ReadOnlyField()

    class Meta:
        model = Profile
        fields = ['id', 'first_name', 'last_name', 'full_name', 'specialization']


class AppointmentListSerializer(serializers.ModelSerializer):
    """List view serializer for appointments"""
    patient_name = serializers.CharField(source='patient.full_name', read_only=True)
    provider_name = serializers.CharField(source='provider.full_name', read_only=True, default=None)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    type_display = serializers.CharField(source='get_appointment_type_display', read_only=True)

    class Meta:
        model = Appointment
        fields = [
            'id', 'patient', 'patient_name', 'provider', 'provider_name',
            'title', 'appointment_type', 'type_display', 'status', 'status_display',
            'scheduled_date', 'start_time', 'end_time'
        ]


class AppointmentDetailSerializer(serializers.ModelSerializer):
    """Detail view serializer for appointments"""
    patient = PatientListSerializer(read_only=True)
    provider = ProviderSummarySerializer(read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = Appointment
        fields = [
            'id', 'clinic_id', 'patient', 'provider', 'title', 'description',
            'appointment_type', 'status', 'status_display', 'scheduled_date',
            'start_time', 'end_time', 'notes', 'telemedicine_link',
            'created_at', 'updated_at'
        ]


class AppointmentCreateUpdateSerializer(TenantMixin, serializers.ModelSerializer):
    """Create/Update serializer for appointments"""
    patient = serializers.PrimaryKeyRelatedField(queryset=Patient.objects.filter(is_active=True))
    provider = serializers.PrimaryKeyRelatedField(
        queryset=Profile.objects.all(), required=False, allow_null=True
    )

    class Meta:
        model = Appointment
        fields = [
            'patient', 'provider', 'title', 'description', 'appointment_type',
            'status', 'scheduled_date', 'start_time', 'end_time', 'notes',
            'telemedicine_link'
        ]

    def validate(self, attrs):
        start_time = attrs.get('start_time', getattr(self.instance, 'start_time', None))
        end_time = attrs.get('end_time', getattr(self.instance, 'end_time', None))
        if start_time and end_time and start_time >= end_time:
            raise serializers.ValidationError({
                'end_time': 'End time must be after start time'
            })
        return attrs

    def to_representation(self, instance):
        return AppointmentDetailSerializer(instance, context=self.context).data


class AppointmentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=AppointmentStatus.choices)


class CalendarQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
