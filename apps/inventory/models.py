# inventory/models.py
from datetime import timedelta
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F

from common.models import ClinicQuerySet, ClinicScopedModel


class StockOperation(models.TextChoices):
    ADD = 'add', 'Add'
    SUBTRACT = 'subtract', 'Subtract'
    SET = 'set', 'Set'


class InventoryCategory(ClinicScopedModel):
    name = models.CharField(max_length=100)
    description = models.TextField(null=True, blank=True)

    class Meta:
        db_table = 'inventory_categories'
        ordering = ['name']
        verbose_name_plural = 'Inventory categories'
        constraints = [
            models.UniqueConstraint(
                fields=['clinic_id', 'name'],
                name='unique_inventory_category_per_clinic'
            ),
        ]

    def __str__(self):
        return self.name


class InventoryItemQuerySet(ClinicQuerySet):
    """Stock derivations evaluated by the database at query time."""

    def active(self):
        return self.filter(is_active=True)

    def low_stock(self):
        return self.filter(quantity__lte=F('min_quantity'))

    def expiring(self, days, today):
        """Items with an expiry date on or before today + days, past ones included."""
        return self.filter(
            expiry_date__isnull=False,
            expiry_date__lte=today + timedelta(days=days),
        )

    def expired(self, today):
        return self.filter(expiry_date__isnull=False, expiry_date__lt=today)


class InventoryItem(ClinicScopedModel):
    """
    InventoryItem Model - a stocked product.

    Low stock and expiry are never stored; they are derived from quantity,
    min_quantity and expiry_date whenever they are asked for.
    """

    category = models.ForeignKey(
        InventoryCategory,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='items'
    )
    name = models.CharField(max_length=200)
    sku = models.CharField(max_length=100, null=True, blank=True)
    description = models.TextField(null=True, blank=True)
    unit = models.CharField(max_length=30, default='pcs')

    quantity = models.PositiveIntegerField(default=0)
    min_quantity = models.PositiveIntegerField(default=10, help_text="Reorder threshold")
    unit_cost = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    selling_price = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    expiry_date = models.DateField(null=True, blank=True)
    supplier_name = models.CharField(max_length=200, null=True, blank=True)
    supplier_contact = models.CharField(max_length=200, null=True, blank=True)
    location = models.CharField(max_length=100, null=True, blank=True)
    is_active = models.BooleanField(default=True)

    updated_at = models.DateTimeField(auto_now=True)

    objects = InventoryItemQuerySet.as_manager()

    class Meta:
        db_table = 'inventory_items'
        ordering = ['name']
        indexes = [
            models.Index(fields=['clinic_id', 'is_active'], name='inv_items_clinic_active_idx'),
            models.Index(fields=['clinic_id', 'expiry_date'], name='inv_items_clinic_expiry_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.quantity} {self.unit})"

    @property
    def is_low_stock(self):
        return self.quantity <= self.min_quantity

    def is_expiring(self, days, today):
        return self.expiry_date is not None and self.expiry_date <= today + timedelta(days=days)

    def is_expired(self, today):
        return self.expiry_date is not None and self.expiry_date < today

    @property
    def stock_value(self):
        return self.quantity * self.unit_cost
