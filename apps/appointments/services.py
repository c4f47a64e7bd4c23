"""
Appointment queries and mutations.
"""
import logging

from django.conf import settings
from django.db import transaction

from common import clock
from common.context import TenantContext
from common.exceptions import InvalidTransition

from .models import Appointment, AppointmentStatus, INACTIVE_STATUSES
from .scheduler import is_allowed_transition, week_of

logger = logging.getLogger(__name__)


def _appointments(ctx):
    return Appointment.objects.for_clinic(ctx).select_related('patient', 'provider')


def list_appointments(ctx: TenantContext, date=None):
    queryset = _appointments(ctx)
    if date is not None:
        queryset = queryset.filter(scheduled_date=date)
    return queryset.order_by('scheduled_date', 'start_time')


def today_appointments(ctx: TenantContext):
    return list_appointments(ctx, date=clock.today())


def upcoming_appointments(ctx: TenantContext, limit=10):
    return _appointments(ctx).filter(
        scheduled_date__gte=clock.today(),
        status__in=[AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED],
    ).order_by('scheduled_date', 'start_time')[:limit]


def week_appointments(ctx: TenantContext, reference_date):
    dates = week_of(reference_date)
    return _appointments(ctx).filter(
        scheduled_date__range=(dates[0], dates[-1])
    ).order_by('scheduled_date', 'start_time')


def get_appointment(ctx: TenantContext, appointment_id) -> Appointment:
    return _appointments(ctx).get(pk=appointment_id)


def create_appointment(ctx: TenantContext, data) -> Appointment:
    appointment = Appointment.objects.create(clinic_id=ctx.require_clinic(), **data)
    logger.info(
        f"Appointment created - Id: {appointment.id}, Patient: {appointment.patient_id}, "
        f"Date: {appointment.scheduled_date}, Clinic: {ctx.clinic_id}"
    )
    return appointment


def update_appointment(ctx: TenantContext, appointment_id, data) -> Appointment:
    """Partial update. A status in ``data`` goes through the transition check."""
    ctx.require_clinic()
    data = dict(data)
    new_status = data.pop('status', None)

    with transaction.atomic():
        appointment = Appointment.objects.for_clinic(ctx).select_for_update().get(pk=appointment_id)
        if new_status is not None:
            _check_transition(appointment, new_status)
            appointment.status = new_status
        for field, value in data.items():
            setattr(appointment, field, value)
        appointment.save()
    return appointment


def set_status(ctx: TenantContext, appointment_id, new_status, strict=None) -> Appointment:
    """
    Move an appointment to ``new_status``.

    With strict transitions (APPOINTMENT_STRICT_TRANSITIONS or ``strict=True``)
    moves outside the status graph raise InvalidTransition; otherwise any
    status may follow any other. Setting the current status again is a no-op.
    """
    ctx.require_clinic()
    new_status = AppointmentStatus(new_status)

    with transaction.atomic():
        appointment = Appointment.objects.for_clinic(ctx).select_for_update().get(pk=appointment_id)
        previous = appointment.status
        _check_transition(appointment, new_status, strict=strict)
        appointment.status = new_status
        appointment.save(update_fields=['status', 'updated_at'])

    logger.info(
        f"Appointment status changed - Id: {appointment.id}, {previous} -> {new_status}, "
        f"Clinic: {ctx.clinic_id}"
    )
    return appointment


def delete_appointment(ctx: TenantContext, appointment_id) -> None:
    ctx.require_clinic()
    Appointment.objects.for_clinic(ctx).get(pk=appointment_id).delete()
    logger.info(f"Appointment deleted - Id: {appointment_id}, Clinic: {ctx.clinic_id}")


def overlapping_appointments(ctx: TenantContext, appointment):
    """
    Other live appointments of the same patient whose time range on the
    same date intersects ``appointment``. Advisory only.
    """
    return _appointments(ctx).filter(
        patient_id=appointment.patient_id,
        scheduled_date=appointment.scheduled_date,
        start_time__lt=appointment.end_time,
        end_time__gt=appointment.start_time,
    ).exclude(
        status__in=INACTIVE_STATUSES
    ).exclude(pk=appointment.pk).order_by('start_time')


def strict_transitions_enabled() -> bool:
    return bool(getattr(settings, 'APPOINTMENT_STRICT_TRANSITIONS', False))


def _check_transition(appointment, new_status, strict=None):
    if strict is None:
        strict = strict_transitions_enabled()
    if strict and not is_allowed_transition(appointment.status, new_status):
        logger.warning(
            f"Rejected appointment transition - Id: {appointment.id}, "
            f"{appointment.status} -> {new_status}"
        )
        raise InvalidTransition(
            f"Cannot change appointment status from '{appointment.status}' to '{new_status}'"
        )
