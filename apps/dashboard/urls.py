from django.urls import path, include
from rest_framework.routers import SimpleRouter
from .views import DashboardViewSet

router = SimpleRouter()
router.register(r'', DashboardViewSet, basename='dashboard')

urlpatterns = [
    path('', include(router.urls)),
]

# Endpoints:
# GET /api/dashboard/stats/                      - Today's rollups
# GET /api/dashboard/revenue/?days=7             - Revenue per day
# GET /api/dashboard/payment-methods/?days=30    - Revenue per payment method
# GET /api/dashboard/recent-patients/?limit=5    - Newest active patients
