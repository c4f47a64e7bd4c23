from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, extend_schema_view

from apps.clinics.services import current_profile
from common.mixins import TenantViewSetMixin

from . import services
from .models import Invoice, Payment
from .serializers import (
    InvoiceCreateSerializer, InvoiceDetailSerializer, InvoiceListSerializer,
    InvoicePaymentSerializer, InvoiceStatusSerializer, InvoiceUpdateSerializer,
    PaymentCreateSerializer, PaymentSerializer
)


@extend_schema_view(
    list=extend_schema(summary="List Invoices", description="Newest invoices first", tags=['Billing - Invoices']),
    retrieve=extend_schema(summary="Get Invoice", description="Invoice with items and payments", tags=['Billing - Invoices']),
    create=extend_schema(
        summary="Create Invoice",
        request=InvoiceCreateSerializer,
        responses={201: InvoiceDetailSerializer},
        tags=['Billing - Invoices']
    ),
    update=extend_schema(summary="Update Invoice", tags=['Billing - Invoices']),
    partial_update=extend_schema(summary="Partial Update Invoice", tags=['Billing - Invoices']),
)
class InvoiceViewSet(TenantViewSetMixin,
                     mixins.ListModelMixin,
                     mixins.RetrieveModelMixin,
                     mixins.CreateModelMixin,
                     mixins.UpdateModelMixin,
                     viewsets.GenericViewSet):
    """
    Invoice Management

    Invoices are never deleted; cancel them through the status action.
    """
    queryset = Invoice.objects.select_related('patient')
    filterset_fields = ['status', 'patient', 'due_date']
    search_fields = ['invoice_number', 'patient__first_name', 'patient__last_name']
    ordering_fields = ['created_at', 'due_date', 'total_amount']
    ordering = ['-created_at']

    def get_serializer_class(self):
        if self.action == 'list':
            return InvoiceListSerializer
        elif self.action == 'create':
            return InvoiceCreateSerializer
        elif self.action in ['update', 'partial_update']:
            return InvoiceUpdateSerializer
        return InvoiceDetailSerializer

    def retrieve(self, request, *args, **kwargs):
        invoice = services.get_invoice_detail(self.tenant_context, self.get_object().pk)
        return Response(InvoiceDetailSerializer(invoice).data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        invoice = services.create_invoice(self.tenant_context, **serializer.validated_data)
        invoice = services.get_invoice_detail(self.tenant_context, invoice.pk)
        return Response(InvoiceDetailSerializer(invoice).data, status=status.HTTP_201_CREATED)

    def perform_update(self, serializer):
        serializer.instance = services.update_invoice(
            self.tenant_context, serializer.instance.pk, serializer.validated_data
        )

    @extend_schema(
        summary="Set Invoice Status",
        description="Manual status change, e.g. draft to sent or cancelled",
        request=InvoiceStatusSerializer,
        responses=InvoiceDetailSerializer,
        tags=['Billing - Invoices']
    )
    @action(detail=True, methods=['post'], url_path='status')
    def set_status(self, request, pk=None):
        invoice = self.get_object()
        serializer = InvoiceStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        invoice = services.set_invoice_status(self.tenant_context, invoice.pk, serializer.validated_data['status'])
        return Response({'success': True, 'data': InvoiceDetailSerializer(invoice).data})

    @extend_schema(
        summary="Invoice Payments",
        description="GET lists the invoice's payments; POST records a new one",
        request=InvoicePaymentSerializer,
        responses=PaymentSerializer(many=True),
        tags=['Billing - Invoices']
    )
    @action(detail=True, methods=['get', 'post'])
    def payments(self, request, pk=None):
        invoice = self.get_object()
        if request.method == 'POST':
            serializer = InvoicePaymentSerializer(data=request.data, context=self.get_serializer_context())
            serializer.is_valid(raise_exception=True)
            payment = services.record_payment(self.tenant_context, invoice.pk, **serializer.validated_data)
            return Response(
                {'success': True, 'data': PaymentSerializer(payment).data},
                status=status.HTTP_201_CREATED
            )

        payments = invoice.payments.select_related('patient', 'invoice').order_by('-payment_date')
        return Response(PaymentSerializer(payments, many=True).data)


@extend_schema_view(
    list=extend_schema(summary="List Payments", description="Newest payments first", tags=['Billing - Payments']),
    retrieve=extend_schema(summary="Get Payment", tags=['Billing - Payments']),
    create=extend_schema(
        summary="Record Payment",
        description="Applies the payment to its invoice and recomputes the invoice status",
        request=PaymentCreateSerializer,
        responses={201: PaymentSerializer},
        tags=['Billing - Payments']
    ),
)
class PaymentViewSet(TenantViewSetMixin,
                     mixins.ListModelMixin,
                     mixins.RetrieveModelMixin,
                     mixins.CreateModelMixin,
                     viewsets.GenericViewSet):
    """Payment ledger and verification queue"""
    queryset = Payment.objects.select_related('patient', 'invoice', 'verified_by')
    filterset_fields = ['payment_method', 'is_verified', 'invoice', 'patient']
    search_fields = ['reference_number', 'invoice__invoice_number', 'patient__first_name', 'patient__last_name']
    ordering_fields = ['payment_date', 'amount']
    ordering = ['-payment_date']

    def get_serializer_class(self):
        if self.action == 'create':
            return PaymentCreateSerializer
        return PaymentSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        invoice = data.pop('invoice')
        payment = services.record_payment(self.tenant_context, invoice.pk, **data)
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @extend_schema(summary="Unverified Payments", tags=['Billing - Payments'])
    @action(detail=False, methods=['get'])
    def pending(self, request):
        payments = services.pending_payments(self.tenant_context)
        serializer = PaymentSerializer(payments, many=True)
        return Response({
            'success': True,
            'count': len(serializer.data),
            'data': serializer.data
        })

    @extend_schema(
        summary="Verify Payment",
        description="Marks the payment verified; repeat calls keep the first verification",
        request=None,
        responses=PaymentSerializer,
        tags=['Billing - Payments']
    )
    @action(detail=True, methods=['post'])
    def verify(self, request, pk=None):
        payment = self.get_object()
        payment = services.verify_payment(
            self.tenant_context, payment.pk, verifier=current_profile(self.tenant_context)
        )
        return Response({'success': True, 'data': PaymentSerializer(payment).data})
