from django.contrib import admin
from import_export.admin import ImportExportModelAdmin

from common.admin_site import TenantModelAdmin
from .models import InventoryCategory, InventoryItem
from .resources import InventoryItemResource


@admin.register(InventoryCategory)
class InventoryCategoryAdmin(TenantModelAdmin):
    list_display = ['name', 'description', 'created_at']
    search_fields = ['name']


@admin.register(InventoryItem)
class InventoryItemAdmin(ImportExportModelAdmin, TenantModelAdmin):
    resource_classes = [InventoryItemResource]
    list_display = [
        'name', 'sku', 'category', 'quantity', 'min_quantity',
        'low_stock', 'expiry_date', 'is_active'
    ]
    list_filter = ['category', 'is_active', 'expiry_date']
    search_fields = ['name', 'sku', 'supplier_name']
    readonly_fields = ['id', 'created_at', 'updated_at']

    @admin.display(boolean=True, description='Low stock')
    def low_stock(self, obj):
        return obj.is_low_stock
