from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiParameter

from common.mixins import TenantViewSetMixin

from . import services
from .models import InventoryCategory, InventoryItem
from .serializers import (
    InventoryCategorySerializer, InventoryItemListSerializer,
    InventoryItemSerializer, StockAdjustmentSerializer
)


@extend_schema_view(
    list=extend_schema(summary="List Categories", tags=['Inventory - Categories']),
    retrieve=extend_schema(summary="Get Category", tags=['Inventory - Categories']),
    create=extend_schema(summary="Create Category", tags=['Inventory - Categories']),
    update=extend_schema(summary="Update Category", tags=['Inventory - Categories']),
    partial_update=extend_schema(summary="Partial Update Category", tags=['Inventory - Categories']),
    destroy=extend_schema(summary="Delete Category", tags=['Inventory - Categories']),
)
class InventoryCategoryViewSet(TenantViewSetMixin, viewsets.ModelViewSet):
    queryset = InventoryCategory.objects.all()
    serializer_class = InventoryCategorySerializer
    search_fields = ['name']
    ordering = ['name']

    def perform_create(self, serializer):
        serializer.instance = services.create_category(self.tenant_context, serializer.validated_data)


@extend_schema_view(
    list=extend_schema(
        summary="List Inventory Items",
        description="Active items ordered by name",
        parameters=[
            OpenApiParameter(name='category', type=str, description='Filter by category ID'),
            OpenApiParameter(name='search', type=str, description='Search by name, SKU or supplier'),
        ],
        tags=['Inventory - Items']
    ),
    retrieve=extend_schema(summary="Get Inventory Item", tags=['Inventory - Items']),
    create=extend_schema(summary="Create Inventory Item", tags=['Inventory - Items']),
    update=extend_schema(summary="Update Inventory Item", tags=['Inventory - Items']),
    partial_update=extend_schema(summary="Partial Update Inventory Item", tags=['Inventory - Items']),
    destroy=extend_schema(
        summary="Deactivate Inventory Item",
        description="Soft delete: the item is marked inactive",
        tags=['Inventory - Items']
    ),
)
class InventoryItemViewSet(TenantViewSetMixin, viewsets.ModelViewSet):
    """
    Inventory Management

    Stock levels change only through adjust_stock; low stock and expiry
    are derived on every request.
    """
    queryset = InventoryItem.objects.select_related('category')
    filterset_fields = ['category', 'unit', 'location']
    search_fields = ['name', 'sku', 'supplier_name']
    ordering_fields = ['name', 'quantity', 'expiry_date', 'created_at']
    ordering = ['name']

    def get_serializer_class(self):
        if self.action in ['list', 'low_stock', 'expiring', 'expired']:
            return InventoryItemListSerializer
        return InventoryItemSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action == 'list':
            queryset = queryset.filter(is_active=True)
        return queryset

    def perform_create(self, serializer):
        serializer.instance = services.create_item(self.tenant_context, serializer.validated_data)

    def perform_update(self, serializer):
        serializer.instance = services.update_item(
            self.tenant_context, serializer.instance.pk, serializer.validated_data
        )

    def destroy(self, request, *args, **kwargs):
        item = self.get_object()
        services.deactivate_item(self.tenant_context, item.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        summary="Adjust Stock",
        description="Add to, subtract from (never below zero) or set the quantity",
        request=StockAdjustmentSerializer,
        responses=InventoryItemSerializer,
        tags=['Inventory - Items']
    )
    @action(detail=True, methods=['post'])
    def adjust_stock(self, request, pk=None):
        item = self.get_object()
        serializer = StockAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        item = services.adjust_stock(
            self.tenant_context,
            item.pk,
            serializer.validated_data['operation'],
            serializer.validated_data['amount'],
        )
        return Response({
            'success': True,
            'data': InventoryItemSerializer(item).data
        })

    @extend_schema(summary="Low Stock Items", tags=['Inventory - Items'])
    @action(detail=False, methods=['get'])
    def low_stock(self, request):
        items = services.low_stock_items(self.tenant_context)
        serializer = InventoryItemListSerializer(items, many=True)
        return Response({
            'success': True,
            'count': len(serializer.data),
            'data': serializer.data
        })

    @extend_schema(
        summary="Expiring Items",
        description="Items expiring within the lookahead window, already expired ones included",
        parameters=[OpenApiParameter(name='days', type=int, description='Lookahead in days (default 30)')],
        tags=['Inventory - Items']
    )
    @action(detail=False, methods=['get'])
    def expiring(self, request):
        days = request.query_params.get('days')
        try:
            days = int(days) if days is not None else None
            if days is not None and days < 0:
                raise ValueError(days)
        except ValueError:
            return Response(
                {'success': False, 'error': 'days must be a non-negative whole number'},
                status=status.HTTP_400_BAD_REQUEST
            )
        items = services.expiring_items(self.tenant_context, days=days)
        serializer = InventoryItemListSerializer(items, many=True)
        return Response({
            'success': True,
            'count': len(serializer.data),
            'data': serializer.data
        })

    @extend_schema(summary="Expired Items", tags=['Inventory - Items'])
    @action(detail=False, methods=['get'])
    def expired(self, request):
        items = services.expired_items(self.tenant_context)
        serializer = InventoryItemListSerializer(items, many=True)
        return Response({
            'success': True,
            'count': len(serializer.data),
            'data': serializer.data
        })

    @extend_schema(summary="Inventory Statistics", tags=['Inventory - Items'])
    @action(detail=False, methods=['get'])
    def statistics(self, request):
        return Response({
            'success': True,
            'data': services.inventory_statistics(self.tenant_context)
        })
