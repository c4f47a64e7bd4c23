"""
Spreadsheet import/export of inventory items (CSV, XLSX, JSON) for the admin.
"""
from import_export import fields, resources
from import_export.widgets import ForeignKeyWidget

from .models import InventoryCategory, InventoryItem


class ClinicCategoryWidget(ForeignKeyWidget):
    """Resolves a category by name inside the row's clinic."""

    def __init__(self):
        super().__init__(InventoryCategory, field='name')

    def get_queryset(self, value, row, *args, **kwargs):
        return InventoryCategory.objects.filter(clinic_id=row.get('clinic_id'))


class InventoryItemResource(resources.ModelResource):
    category = fields.Field(
        column_name='category',
        attribute='category',
        widget=ClinicCategoryWidget(),
    )

    class Meta:
        model = InventoryItem
        fields = (
            'id', 'clinic_id', 'name', 'sku', 'category', 'description', 'unit',
            'quantity', 'min_quantity', 'unit_cost', 'selling_price',
            'expiry_date', 'supplier_name', 'supplier_contact', 'location',
            'is_active',
        )
        import_id_fields = ('id',)
        skip_unchanged = True
        report_skipped = True
