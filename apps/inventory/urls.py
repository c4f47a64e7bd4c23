from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import InventoryCategoryViewSet, InventoryItemViewSet

router = DefaultRouter()
router.register(r'categories', InventoryCategoryViewSet, basename='inventory-category')
router.register(r'items', InventoryItemViewSet, basename='inventory-item')

urlpatterns = [
    path('', include(router.urls)),
]

# Custom Actions:
# POST   /api/inventory/items/{id}/adjust_stock/   - Add / subtract / set quantity
# GET    /api/inventory/items/low_stock/           - quantity <= min_quantity
# GET    /api/inventory/items/expiring/?days=30    - Expiring within N days
# GET    /api/inventory/items/expired/             - Already expired
# GET    /api/inventory/items/statistics/          - Stock totals
