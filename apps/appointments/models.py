# appointments/models.py
from django.db import models
from django.db.models import F, Q

from common.models import ClinicScopedModel


class AppointmentStatus(models.TextChoices):
    SCHEDULED = 'scheduled', 'Scheduled'
    CONFIRMED = 'confirmed', 'Confirmed'
    IN_PROGRESS = 'in_progress', 'In Progress'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'
    NO_SHOW = 'no_show', 'No Show'


class AppointmentType(models.TextChoices):
    CONSULTATION = 'consultation', 'Consultation'
    FOLLOW_UP = 'follow_up', 'Follow-up'
    PROCEDURE = 'procedure', 'Procedure'
    EMERGENCY = 'emergency', 'Emergency'
    TELEMEDICINE = 'telemedicine', 'Telemedicine'


# Statuses that no longer hold a slot on the calendar
INACTIVE_STATUSES = (AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW)


class Appointment(ClinicScopedModel):
    """
    Appointment Model - a patient's booking on a given date and time range.
    """

    patient = models.ForeignKey(
        'patients.Patient',
        on_delete=models.CASCADE,
        related_name='appointments'
    )
    provider = models.ForeignKey(
        'clinics.Profile',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='appointments'
    )

    title = models.CharField(max_length=200)
    description = models.TextField(null=True, blank=True)
    appointment_type = models.CharField(
        max_length=20,
        choices=AppointmentType.choices,
        default=AppointmentType.CONSULTATION
    )
    status = models.CharField(
        max_length=20,
        choices=AppointmentStatus.choices,
        default=AppointmentStatus.SCHEDULED
    )

    scheduled_date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()

    notes = models.TextField(null=True, blank=True)
    telemedicine_link = models.URLField(max_length=500, null=True, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'appointments'
        ordering = ['scheduled_date', 'start_time']
        indexes = [
            models.Index(fields=['clinic_id', 'scheduled_date'], name='appt_clinic_date_idx'),
            models.Index(fields=['clinic_id', 'status'], name='appt_clinic_status_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(start_time__lt=F('end_time')),
                name='appointment_start_before_end'
            ),
        ]

    def __str__(self):
        return f"{self.title} - {self.scheduled_date} {self.start_time:%H:%M}"

    @property
    def slot_label(self):
        """Start time truncated to minutes, as used by the week grid."""
        return self.start_time.strftime('%H:%M')

    def overlaps(self, other):
        return (
            self.scheduled_date == other.scheduled_date
            and self.start_time < other.end_time
            and other.start_time < self.end_time
        )
