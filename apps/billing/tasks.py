"""
Celery tasks for the billing module
"""
import logging

from celery import shared_task

from common import clock
from common.context import TenantContext

from .models import Invoice, InvoiceStatus
from .services import mark_overdue

logger = logging.getLogger(__name__)


@shared_task(bind=True, name='billing.mark_overdue_invoices')
def mark_overdue_invoices_task(self, clinic_id: str = None):
    """
    Flag past-due invoices as overdue, clinic by clinic.

    Args:
        clinic_id: limit the run to one clinic; all clinics when omitted

    Returns:
        dict: clinic id -> number of invoices marked overdue
    """
    today = clock.today()

    if clinic_id:
        clinic_ids = [clinic_id]
    else:
        clinic_ids = (
            Invoice.objects
            .filter(status__in=[InvoiceStatus.SENT, InvoiceStatus.PARTIAL], due_date__lt=today)
            .values_list('clinic_id', flat=True)
            .order_by()
            .distinct()
        )

    results = {}
    for cid in clinic_ids:
        ctx = TenantContext(clinic_id=cid)
        results[str(cid)] = mark_overdue(ctx, today=today)

    logger.info(f"Overdue run finished - Date: {today}, Marked: {sum(results.values())}")
    return results
