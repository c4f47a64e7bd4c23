"""
Celery tasks for the inventory module
"""
import logging

from celery import shared_task
from django.conf import settings

from common import clock
from common.context import TenantContext

from .models import InventoryItem
from .services import expired_items, expiring_items, low_stock_items

logger = logging.getLogger(__name__)


@shared_task(bind=True, name='inventory.expiring_items_report')
def expiring_items_report_task(self, days: int = None):
    """
    Log expiring, expired and low-stock counts for every clinic with stock.

    Returns:
        dict: clinic id -> {'expiring': n, 'expired': n, 'low_stock': n}
    """
    if days is None:
        days = settings.INVENTORY_EXPIRY_LOOKAHEAD_DAYS
    today = clock.today()

    clinic_ids = InventoryItem.objects.filter(is_active=True).values_list('clinic_id', flat=True).order_by().distinct()

    report = {}
    for clinic_id in clinic_ids:
        ctx = TenantContext(clinic_id=clinic_id)
        counts = {
            'expiring': expiring_items(ctx, days=days, today=today).count(),
            'expired': expired_items(ctx, today=today).count(),
            'low_stock': low_stock_items(ctx).count(),
        }
        report[str(clinic_id)] = counts
        if any(counts.values()):
            logger.warning(
                f"Inventory attention needed - Clinic: {clinic_id}, Expiring({days}d): {counts['expiring']}, "
                f"Expired: {counts['expired']}, Low stock: {counts['low_stock']}"
            )

    logger.info(f"Inventory report finished - Date: {today}, Clinics: {len(report)}")
    return report
