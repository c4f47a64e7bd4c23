from rest_framework import serializers

from common import clock
from common.mixins import TenantMixin
from .models import InventoryCategory, InventoryItem, StockOperation


class InventoryCategorySerializer(TenantMixin, serializers.ModelSerializer):
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = InventoryCategory
        fields = ['id', 'clinic_id', 'name', 'description', 'item_count', 'created_at']
        read_only_fields = ['id', 'clinic_id', 'created_at']

    def get_item_count(self, obj):
        return obj.items.filter(is_active=True).count()

    def validate_name(self, value):
        ctx = self.context.get('tenant_context')
        if ctx is not None and ctx.has_clinic:
            duplicates = InventoryCategory.objects.for_clinic(ctx).filter(name__iexact=value)
            if self.instance is not None:
                duplicates = duplicates.exclude(pk=self.instance.pk)
            if duplicates.exists():
                raise serializers.ValidationError('A category with this name already exists')
        return value


class InventoryItemListSerializer(serializers.ModelSerializer):
    """List view serializer for inventory items"""
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    is_low_stock = serializers.BooleanField(read_only=True)
    is_expired = serializers.SerializerMethodField()

    class Meta:
        model = InventoryItem
        fields = [
            'id', 'name', 'sku', 'category', 'category_name', 'unit', 'quantity',
            'min_quantity', 'selling_price', 'expiry_date', 'is_low_stock',
            'is_expired', 'is_active'
        ]

    def get_is_expired(self, obj):
        return obj.is_expired(clock.today())


class InventoryItemSerializer(TenantMixin, serializers.ModelSerializer):
    """Detail and create/update serializer; quantity changes after creation go through adjust_stock"""
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    is_low_stock = serializers.BooleanField(read_only=True)
    stock_value = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = InventoryItem
        fields = [
            'id', 'clinic_id', 'category', 'category_name', 'name', 'sku',
            'description', 'unit', 'quantity', 'min_quantity', 'unit_cost',
            'selling_price', 'expiry_date', 'supplier_name', 'supplier_contact',
            'location', 'is_active', 'is_low_stock', 'stock_value',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'clinic_id', 'is_active', 'created_at', 'updated_at']

    def validate_quantity(self, value):
        if self.instance is not None and value != self.instance.quantity:
            raise serializers.ValidationError('Use the adjust_stock action to change quantity')
        return value


class StockAdjustmentSerializer(serializers.Serializer):
    operation = serializers.ChoiceField(choices=StockOperation.choices)
    amount = serializers.IntegerField(min_value=0)
