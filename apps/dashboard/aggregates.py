"""
Dashboard rollups.

Read-only: every figure is one grouped query against the clinic's rows;
nothing here writes.
"""
from datetime import datetime, time, timedelta
from decimal import Decimal

from django.conf import settings
from django.db.models import Count, DecimalField, ExpressionWrapper, F, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from apps.appointments.models import Appointment, AppointmentStatus
from apps.billing.models import OUTSTANDING_STATUSES, Invoice, Payment
from apps.inventory.models import InventoryItem
from apps.patients.models import Patient
from common import clock
from common.context import TenantContext

ZERO = Decimal('0.00')


def _day_bounds(day):
    """Aware [start, end) datetimes of ``day`` in the active time zone."""
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime.combine(day, time.min), tz)
    return start, start + timedelta(days=1)


def today_appointment_count(ctx: TenantContext, today=None) -> int:
    today = today or clock.today()
    return Appointment.objects.for_clinic(ctx).filter(scheduled_date=today).count()


def active_patient_count(ctx: TenantContext) -> int:
    return Patient.objects.for_clinic(ctx).filter(is_active=True).count()


def today_revenue(ctx: TenantContext, today=None) -> Decimal:
    start, end = _day_bounds(today or clock.today())
    total = (
        Payment.objects.for_clinic(ctx)
        .filter(payment_date__gte=start, payment_date__lt=end)
        .aggregate(total=Sum('amount'))['total']
    )
    return total or ZERO


def outstanding_balance(ctx: TenantContext) -> Decimal:
    """Unpaid remainder of sent, partially paid and overdue invoices."""
    remainder = ExpressionWrapper(
        F('total_amount') - F('paid_amount'),
        output_field=DecimalField(max_digits=12, decimal_places=2)
    )
    total = (
        Invoice.objects.for_clinic(ctx)
        .filter(status__in=OUTSTANDING_STATUSES)
        .aggregate(total=Sum(remainder))['total']
    )
    return total or ZERO


def appointment_status_counts(ctx: TenantContext, today=None) -> dict:
    """Today's appointments per status; every status is present, zero or not."""
    today = today or clock.today()
    counts = {value: 0 for value in AppointmentStatus.values}
    rows = (
        Appointment.objects.for_clinic(ctx)
        .filter(scheduled_date=today)
        .order_by()
        .values('status')
        .annotate(count=Count('id'))
    )
    for row in rows:
        counts[row['status']] = row['count']
    return counts


def low_stock_count(ctx: TenantContext) -> int:
    return InventoryItem.objects.for_clinic(ctx).active().low_stock().count()


def revenue_by_day(ctx: TenantContext, days=None) -> list:
    """Payment totals per local calendar day over the trailing window, oldest first."""
    if days is None:
        days = settings.DASHBOARD_REVENUE_DAYS
    since = clock.now() - timedelta(days=days)
    rows = (
        Payment.objects.for_clinic(ctx)
        .filter(payment_date__gte=since)
        .annotate(day=TruncDate('payment_date', tzinfo=timezone.get_current_timezone()))
        .order_by()
        .values('day')
        .annotate(amount=Sum('amount'))
        .order_by('day')
    )
    return [{'date': row['day'].isoformat(), 'amount': row['amount']} for row in rows]


def revenue_by_method(ctx: TenantContext, days=None) -> list:
    """Payment totals per payment method over the trailing window, largest first."""
    if days is None:
        days = settings.DASHBOARD_PAYMENT_METHOD_DAYS
    since = clock.now() - timedelta(days=days)
    rows = (
        Payment.objects.for_clinic(ctx)
        .filter(payment_date__gte=since)
        .order_by()
        .values('payment_method')
        .annotate(amount=Sum('amount'))
        .order_by('-amount', 'payment_method')
    )
    return [{'method': row['payment_method'], 'amount': row['amount']} for row in rows]


def recent_patients(ctx: TenantContext, limit=5) -> list:
    return list(
        Patient.objects.for_clinic(ctx)
        .filter(is_active=True)
        .order_by('-created_at')
        .values('id', 'first_name', 'last_name', 'avatar_url', 'created_at')[:limit]
    )


def dashboard_stats(ctx: TenantContext, today=None) -> dict:
    today = today or clock.today()
    return {
        'today_appointments': today_appointment_count(ctx, today),
        'total_patients': active_patient_count(ctx),
        'today_revenue': today_revenue(ctx, today),
        'pending_amount': outstanding_balance(ctx),
        'appointment_statuses': appointment_status_counts(ctx, today),
        'low_stock_count': low_stock_count(ctx),
    }
