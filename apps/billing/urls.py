from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import InvoiceViewSet, PaymentViewSet

router = DefaultRouter()
router.register(r'invoices', InvoiceViewSet, basename='invoice')
router.register(r'payments', PaymentViewSet, basename='payment')

urlpatterns = [
    path('', include(router.urls)),
]

# Custom Actions:
# POST   /api/billing/invoices/{id}/status/     - Set invoice status
# GET    /api/billing/invoices/{id}/payments/   - Invoice payments / POST record payment
# GET    /api/billing/payments/pending/         - Unverified payments
# POST   /api/billing/payments/{id}/verify/     - Verify payment
