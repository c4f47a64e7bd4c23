"""
Patient records: demographics plus allergies, medications and history.
"""
import logging

from common.context import TenantContext

from .models import Patient, PatientAllergy, PatientMedicalHistory, PatientMedication

logger = logging.getLogger(__name__)


def list_patients(ctx: TenantContext, include_inactive=False):
    queryset = Patient.objects.for_clinic(ctx)
    if not include_inactive:
        queryset = queryset.filter(is_active=True)
    return queryset.order_by('last_name', 'first_name')


def get_patient(ctx: TenantContext, patient_id) -> Patient:
    return Patient.objects.for_clinic(ctx).get(pk=patient_id)


def create_patient(ctx: TenantContext, data) -> Patient:
    patient = Patient.objects.create(clinic_id=ctx.require_clinic(), **data)
    logger.info(f"Patient created - Id: {patient.id}, Clinic: {ctx.clinic_id}")
    return patient


def update_patient(ctx: TenantContext, patient_id, data) -> Patient:
    ctx.require_clinic()
    patient = get_patient(ctx, patient_id)
    for field, value in data.items():
        setattr(patient, field, value)
    patient.save()
    return patient


def deactivate_patient(ctx: TenantContext, patient_id) -> Patient:
    """Soft delete. Deactivating an inactive patient is a no-op."""
    ctx.require_clinic()
    patient = get_patient(ctx, patient_id)
    if patient.is_active:
        patient.is_active = False
        patient.save(update_fields=['is_active', 'updated_at'])
        logger.info(f"Patient deactivated - Id: {patient.id}, Clinic: {ctx.clinic_id}")
    return patient


# ---------------------------------------------------------------------------
# Clinical lists
# ---------------------------------------------------------------------------

def list_allergies(ctx: TenantContext, patient_id):
    return PatientAllergy.objects.for_clinic(ctx).filter(patient_id=patient_id)


def add_allergy(ctx: TenantContext, patient_id, data) -> PatientAllergy:
    clinic_id = ctx.require_clinic()
    patient = get_patient(ctx, patient_id)
    return PatientAllergy.objects.create(clinic_id=clinic_id, patient=patient, **data)


def delete_allergy(ctx: TenantContext, allergy_id) -> None:
    ctx.require_clinic()
    PatientAllergy.objects.for_clinic(ctx).get(pk=allergy_id).delete()


def list_medications(ctx: TenantContext, patient_id):
    """Active medications only."""
    return PatientMedication.objects.for_clinic(ctx).filter(
        patient_id=patient_id, is_active=True
    )


def add_medication(ctx: TenantContext, patient_id, data) -> PatientMedication:
    clinic_id = ctx.require_clinic()
    patient = get_patient(ctx, patient_id)
    return PatientMedication.objects.create(clinic_id=clinic_id, patient=patient, **data)


def update_medication(ctx: TenantContext, medication_id, data) -> PatientMedication:
    ctx.require_clinic()
    medication = PatientMedication.objects.for_clinic(ctx).get(pk=medication_id)
    for field, value in data.items():
        setattr(medication, field, value)
    medication.save()
    return medication


def list_medical_history(ctx: TenantContext, patient_id):
    """Newest entries first."""
    return PatientMedicalHistory.objects.for_clinic(ctx).filter(
        patient_id=patient_id
    ).order_by('-created_at')


def add_medical_history(ctx: TenantContext, patient_id, data) -> PatientMedicalHistory:
    clinic_id = ctx.require_clinic()
    patient = get_patient(ctx, patient_id)
    return PatientMedicalHistory.objects.create(clinic_id=clinic_id, patient=patient, **data)
