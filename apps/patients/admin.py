from django.contrib import admin
from common.admin_site import TenantModelAdmin
from .models import Patient, PatientAllergy, PatientMedication, PatientMedicalHistory


class PatientAllergyInline(admin.TabularInline):
    model = PatientAllergy
    extra = 0
    fields = ['allergy_name', 'severity', 'notes']


class PatientMedicationInline(admin.TabularInline):
    model = PatientMedication
    extra = 0
    fields = ['medication_name', 'dosage', 'frequency', 'start_date', 'end_date', 'is_active']


class PatientMedicalHistoryInline(admin.TabularInline):
    model = PatientMedicalHistory
    extra = 0
    fields = ['condition', 'diagnosis_date', 'status', 'notes']


@admin.register(Patient)
class PatientAdmin(TenantModelAdmin):
    list_display = ['full_name', 'phone', 'email', 'gender', 'city', 'is_active', 'created_at']
    list_filter = ['gender', 'blood_type', 'is_active']
    search_fields = ['first_name', 'last_name', 'phone', 'email']
    readonly_fields = ['id', 'created_at', 'updated_at']
    inlines = [PatientAllergyInline, PatientMedicationInline, PatientMedicalHistoryInline]

    fieldsets = (
        ('Identity', {
            'fields': ('id', 'clinic_id', 'first_name', 'last_name', 'date_of_birth', 'gender', 'blood_type')
        }),
        ('Contact', {
            'fields': ('email', 'phone', 'address', 'city')
        }),
        ('Emergency Contact', {
            'fields': ('emergency_contact_name', 'emergency_contact_phone', 'emergency_contact_relation'),
            'classes': ('collapse',)
        }),
        ('Other', {
            'fields': ('avatar_url', 'notes', 'is_active', 'created_at', 'updated_at')
        }),
    )
