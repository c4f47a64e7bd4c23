# patients/models.py
from django.db import models

from common import clock
from common.models import ClinicScopedModel


class Gender(models.TextChoices):
    MALE = 'male', 'Male'
    FEMALE = 'female', 'Female'
    OTHER = 'other', 'Other'


class AllergySeverity(models.TextChoices):
    MILD = 'mild', 'Mild'
    MODERATE = 'moderate', 'Moderate'
    SEVERE = 'severe', 'Severe'


class MedicalHistoryStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    RESOLVED = 'resolved', 'Resolved'
    CHRONIC = 'chronic', 'Chronic'


class Patient(ClinicScopedModel):
    """
    Patient Model - demographic and contact record of a clinic's patient.

    Patients are never hard-deleted; deactivation clears is_active and the
    row keeps its appointments and invoices.
    """

    BLOOD_TYPE_CHOICES = [
        ('A+', 'A+'), ('A-', 'A-'),
        ('B+', 'B+'), ('B-', 'B-'),
        ('AB+', 'AB+'), ('AB-', 'AB-'),
        ('O+', 'O+'), ('O-', 'O-'),
    ]

    # Identity
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, choices=Gender.choices, null=True, blank=True)
    blood_type = models.CharField(max_length=3, choices=BLOOD_TYPE_CHOICES, null=True, blank=True)

    # Contact
    email = models.EmailField(null=True, blank=True)
    phone = models.CharField(max_length=20, null=True, blank=True)
    address = models.TextField(null=True, blank=True)
    city = models.CharField(max_length=100, null=True, blank=True)

    # Emergency contact
    emergency_contact_name = models.CharField(max_length=200, null=True, blank=True)
    emergency_contact_phone = models.CharField(max_length=20, null=True, blank=True)
    emergency_contact_relation = models.CharField(max_length=50, null=True, blank=True)

    avatar_url = models.URLField(max_length=500, null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'patients'
        ordering = ['last_name', 'first_name']
        indexes = [
            models.Index(fields=['clinic_id', 'is_active'], name='patients_clinic_active_idx'),
            models.Index(fields=['clinic_id', 'last_name'], name='patients_clinic_name_idx'),
        ]

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def age(self):
        if not self.date_of_birth:
            return None
        today = clock.today()
        return today.year - self.date_of_birth.year - (
            (today.month, today.day) < (self.date_of_birth.month, self.date_of_birth.day)
        )


class PatientAllergy(ClinicScopedModel):
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='allergies')
    allergy_name = models.CharField(max_length=200)
    severity = models.CharField(
        max_length=10,
        choices=AllergySeverity.choices,
        default=AllergySeverity.MILD
    )
    notes = models.TextField(null=True, blank=True)

    class Meta:
        db_table = 'patient_allergies'
        ordering = ['allergy_name']
        verbose_name_plural = 'Patient allergies'

    def __str__(self):
        return f"{self.patient} - {self.allergy_name} ({self.severity})"


class PatientMedication(ClinicScopedModel):
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='medications')
    medication_name = models.CharField(max_length=200)
    dosage = models.CharField(max_length=100, null=True, blank=True)
    frequency = models.CharField(max_length=100, null=True, blank=True)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    prescribing_doctor = models.CharField(max_length=200, null=True, blank=True)
    is_active = models.BooleanField(default=True)
    notes = models.TextField(null=True, blank=True)

    class Meta:
        db_table = 'patient_medications'
        ordering = ['medication_name']

    def __str__(self):
        return f"{self.patient} - {self.medication_name}"


class PatientMedicalHistory(ClinicScopedModel):
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='medical_history')
    condition = models.CharField(max_length=200)
    diagnosis_date = models.DateField(null=True, blank=True)
    status = models.CharField(
        max_length=10,
        choices=MedicalHistoryStatus.choices,
        default=MedicalHistoryStatus.ACTIVE
    )
    notes = models.TextField(null=True, blank=True)

    class Meta:
        db_table = 'patient_medical_history'
        ordering = ['-created_at']
        verbose_name_plural = 'Patient medical history'

    def __str__(self):
        return f"{self.patient} - {self.condition}"
