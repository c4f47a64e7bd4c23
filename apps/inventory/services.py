"""
Inventory stock ledger.

Stock changes are a single UPDATE computed by the database from the
current row value, so two concurrent adjustments cannot overwrite each
other.
"""
import logging

from django.conf import settings
from django.db import transaction
from django.db.models import Count, DecimalField, F, Q, Sum, Value
from django.db.models.functions import Greatest

from apps.dashboard.cache import invalidate_clinic
from common import clock
from common.context import TenantContext
from common.exceptions import StockAdjustmentError

from .models import InventoryCategory, InventoryItem, StockOperation

logger = logging.getLogger(__name__)


def list_items(ctx: TenantContext):
    return InventoryItem.objects.for_clinic(ctx).active().select_related('category').order_by('name')


def get_item(ctx: TenantContext, item_id) -> InventoryItem:
    return InventoryItem.objects.for_clinic(ctx).select_related('category').get(pk=item_id)


def list_categories(ctx: TenantContext):
    return InventoryCategory.objects.for_clinic(ctx).order_by('name')


def create_category(ctx: TenantContext, data) -> InventoryCategory:
    return InventoryCategory.objects.create(clinic_id=ctx.require_clinic(), **data)


def create_item(ctx: TenantContext, data) -> InventoryItem:
    item = InventoryItem.objects.create(clinic_id=ctx.require_clinic(), **data)
    logger.info(f"Inventory item created - Id: {item.id}, Name: {item.name}, Clinic: {ctx.clinic_id}")
    return item


def update_item(ctx: TenantContext, item_id, data) -> InventoryItem:
    ctx.require_clinic()
    item = get_item(ctx, item_id)
    for field, value in data.items():
        setattr(item, field, value)
    item.save()
    return item


def deactivate_item(ctx: TenantContext, item_id) -> InventoryItem:
    """Soft delete. Deactivating an inactive item is a no-op."""
    ctx.require_clinic()
    item = get_item(ctx, item_id)
    if item.is_active:
        item.is_active = False
        item.save(update_fields=['is_active', 'updated_at'])
        logger.info(f"Inventory item deactivated - Id: {item.id}, Clinic: {ctx.clinic_id}")
    return item


def adjust_stock(ctx: TenantContext, item_id, operation, amount) -> InventoryItem:
    """
    Apply ``operation`` (add, subtract or set) with ``amount`` to an item's quantity.

    Subtracting more than is in stock leaves the quantity at zero.
    """
    ctx.require_clinic()
    try:
        operation = StockOperation(operation)
    except ValueError:
        raise StockAdjustmentError(f"Unknown stock operation '{operation}'")
    try:
        amount = int(amount)
    except (TypeError, ValueError):
        raise StockAdjustmentError('Stock amount must be a whole number')
    if amount < 0:
        raise StockAdjustmentError('Stock amount cannot be negative')

    if operation == StockOperation.ADD:
        new_quantity = F('quantity') + amount
    elif operation == StockOperation.SUBTRACT:
        new_quantity = Greatest(F('quantity') - amount, Value(0))
    else:
        new_quantity = Value(amount)

    with transaction.atomic():
        updated = InventoryItem.objects.for_clinic(ctx).filter(pk=item_id).update(
            quantity=new_quantity,
            updated_at=clock.now(),
        )
        if not updated:
            raise InventoryItem.DoesNotExist('Inventory item not found')
        item = get_item(ctx, item_id)
        # Bulk updates bypass post_save, so dependent rollups are refreshed on commit
        clinic_id = ctx.clinic_id
        transaction.on_commit(lambda: invalidate_clinic(clinic_id))

    logger.info(
        f"Stock adjusted - Item: {item.id}, Operation: {operation}, Amount: {amount}, "
        f"Quantity: {item.quantity}, Clinic: {ctx.clinic_id}"
    )
    return item


def low_stock_items(ctx: TenantContext):
    return list_items(ctx).low_stock().order_by('quantity', 'name')


def expiring_items(ctx: TenantContext, days=None, today=None):
    if days is None:
        days = settings.INVENTORY_EXPIRY_LOOKAHEAD_DAYS
    today = today or clock.today()
    return list_items(ctx).expiring(days, today).order_by('expiry_date', 'name')


def expired_items(ctx: TenantContext, today=None):
    today = today or clock.today()
    return list_items(ctx).expired(today).order_by('expiry_date', 'name')


def inventory_statistics(ctx: TenantContext, days=None, today=None):
    if days is None:
        days = settings.INVENTORY_EXPIRY_LOOKAHEAD_DAYS
    today = today or clock.today()
    items = list_items(ctx)
    totals = items.aggregate(
        total_items=Count('id'),
        total_quantity=Sum('quantity'),
        stock_value=Sum(F('quantity') * F('unit_cost'), output_field=DecimalField(max_digits=14, decimal_places=2)),
        low_stock=Count('id', filter=Q(quantity__lte=F('min_quantity'))),
    )
    return {
        'total_items': totals['total_items'] or 0,
        'total_quantity': totals['total_quantity'] or 0,
        'stock_value': totals['stock_value'] or 0,
        'low_stock_count': totals['low_stock'] or 0,
        'expiring_count': items.expiring(days, today).count(),
        'expired_count': items.expired(today).count(),
        'category_count': list_categories(ctx).count(),
    }
