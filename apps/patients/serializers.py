from rest_framework import serializers

from common import clock
from common.mixins import TenantMixin
from .models import Patient, PatientAllergy, PatientMedicalHistory, PatientMedication


class PatientAllergySerializer(serializers.ModelSerializer):
    """Patient allergy serializer"""
    severity_display = serializers.CharField(source='get_severity_display', read_only=True)

    class Meta:
        model = PatientAllergy
        fields = ['id', 'patient', 'allergy_name', 'severity', 'severity_display', 'notes', 'created_at']
        read_only_fields = ['id', 'patient', 'created_at']


class PatientMedicationSerializer(serializers.ModelSerializer):
    class Meta:
        model = PatientMedication
        fields = [
            'id', 'patient', 'medication_name', 'dosage', 'frequency',
            'start_date', 'end_date', 'prescribing_doctor', 'is_active',
            'notes', 'created_at'
        ]
        read_only_fields = ['id', 'patient', 'created_at']

    def validate(self, attrs):
        start_date = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end_date = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start_date and end_date and end_date < start_date:
            raise serializers.ValidationError({
                'end_date': 'End date cannot be before start date'
            })
        return attrs


class PatientMedicalHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = PatientMedicalHistory
        fields = ['id', 'patient', 'condition', 'diagnosis_date', 'status', 'notes', 'created_at']
        read_only_fields = ['id', 'patient', 'created_at']


class PatientListSerializer(TenantMixin, serializers.ModelSerializer):
    """List view serializer for patients"""
    full_name = serializers.ReadOnlyField()
    age = serializers.ReadOnlyField()

    class Meta:
        model = Patient
        fields = [
            'id', 'first_name', 'last_name', 'full_name', 'age', 'gender',
            'phone', 'email', 'city', 'is_active', 'created_at'
        ]


class PatientDetailSerializer(TenantMixin, serializers.ModelSerializer):
    """Detail view serializer with clinical lists"""
    full_name = serializers.ReadOnlyField()
    age = serializers.ReadOnlyField()
    allergies = PatientAllergySerializer(many=True, read_only=True)

    class Meta:
        model = Patient
        fields = [
            'id', 'clinic_id', 'first_name', 'last_name', 'full_name', 'age',
            'email', 'phone', 'date_of_birth', 'gender', 'blood_type',
            'address', 'city', 'emergency_contact_name', 'emergency_contact_phone',
            'emergency_contact_relation', 'avatar_url', 'notes', 'is_active',
            'allergies', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'clinic_id', 'is_active', 'created_at', 'updated_at']


class PatientCreateUpdateSerializer(TenantMixin, serializers.ModelSerializer):
    """Create/Update serializer for patients"""

    class Meta:
        model = Patient
        fields = [
            'first_name', 'last_name', 'email', 'phone', 'date_of_birth',
            'gender', 'blood_type', 'address', 'city', 'emergency_contact_name',
            'emergency_contact_phone', 'emergency_contact_relation',
            'avatar_url', 'notes'
        ]

    def validate_first_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('First name is required')
        return value.strip()

    def validate_last_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Last name is required')
        return value.strip()

    def validate_date_of_birth(self, value):
        if value and value > clock.today():
            raise serializers.ValidationError('Date of birth cannot be in the future')
        return value

    def to_representation(self, instance):
        return PatientDetailSerializer(instance, context=self.context).data
