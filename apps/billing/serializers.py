from decimal import Decimal

from rest_framework import serializers

from apps.patients.models import Patient
from common.mixins import TenantMixin
from .models import Invoice, InvoiceItem, InvoiceStatus, Payment, PaymentMethod


class PatientBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Patient
        fields = ['id', 'first_name', 'last_name', 'email', 'phone']


class InvoiceItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = InvoiceItem
        fields = ['id', 'description', 'quantity', 'unit_price', 'total_price', 'created_at']
        read_only_fields = ['id', 'total_price', 'created_at']


class InvoiceItemInputSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=255)
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'))


class PaymentSerializer(serializers.ModelSerializer):
    """Payment with the invoice number and patient name for ledgers"""
    invoice_number = serializers.CharField(source='invoice.invoice_number', read_only=True)
    patient_name = serializers.CharField(source='patient.full_name', read_only=True)
    method_display = serializers.CharField(source='get_payment_method_display', read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id', 'invoice', 'invoice_number', 'patient', 'patient_name', 'amount',
            'payment_method', 'method_display', 'payment_date', 'reference_number',
            'proof_url', 'is_verified', 'verified_by', 'verified_at', 'notes', 'created_at'
        ]
        read_only_fields = fields


class PaymentCreateSerializer(TenantMixin, serializers.Serializer):
    invoice = serializers.PrimaryKeyRelatedField(queryset=Invoice.objects.all())
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    payment_date = serializers.DateTimeField(required=False)
    reference_number = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    proof_url = serializers.URLField(max_length=500, required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('Amount must be greater than zero')
        return value


class InvoicePaymentSerializer(PaymentCreateSerializer):
    """Payment posted to /invoices/{id}/payments/; the invoice comes from the URL"""
    invoice = None


class InvoiceListSerializer(serializers.ModelSerializer):
    """List view serializer for invoices"""
    patient = PatientBriefSerializer(read_only=True)
    balance_due = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = Invoice
        fields = [
            'id', 'invoice_number', 'patient', 'status', 'status_display',
            'total_amount', 'paid_amount', 'balance_due', 'due_date', 'created_at'
        ]


class InvoiceDetailSerializer(serializers.ModelSerializer):
    """Invoice with items and payments (newest first)"""
    patient = PatientBriefSerializer(read_only=True)
    balance_due = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    items = serializers.SerializerMethodField()
    payments = serializers.SerializerMethodField()

    class Meta:
        model = Invoice
        fields = [
            'id', 'clinic_id', 'invoice_number', 'patient', 'status', 'subtotal',
            'tax_amount', 'discount_amount', 'total_amount', 'paid_amount',
            'balance_due', 'due_date', 'notes', 'items', 'payments',
            'created_at', 'updated_at'
        ]

    def get_items(self, obj):
        items = getattr(obj, 'item_list', None)
        if items is None:
            items = obj.items.all()
        return InvoiceItemSerializer(items, many=True).data

    def get_payments(self, obj):
        payments = getattr(obj, 'payment_list', None)
        if payments is None:
            payments = obj.payments.order_by('-payment_date')
        return PaymentSerializer(payments, many=True).data


class InvoiceCreateSerializer(TenantMixin, serializers.Serializer):
    patient = serializers.PrimaryKeyRelatedField(queryset=Patient.objects.all())
    items = InvoiceItemInputSerializer(many=True)
    tax_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'), default=Decimal('0.00'))
    discount_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'), default=Decimal('0.00'))
    due_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError('At least one line item is required')
        return value

    def validate(self, attrs):
        subtotal = sum(item['quantity'] * item['unit_price'] for item in attrs['items'])
        if attrs['discount_amount'] > subtotal + attrs['tax_amount']:
            raise serializers.ValidationError({
                'discount_amount': 'Discount cannot exceed the invoice amount'
            })
        return attrs


class InvoiceUpdateSerializer(serializers.ModelSerializer):
    """Partial update of invoice amounts and metadata"""

    class Meta:
        model = Invoice
        fields = ['subtotal', 'tax_amount', 'discount_amount', 'due_date', 'notes']
        extra_kwargs = {
            'subtotal': {'min_value': Decimal('0.00')},
            'tax_amount': {'min_value': Decimal('0.00')},
            'discount_amount': {'min_value': Decimal('0.00')},
        }

    def validate(self, attrs):
        def current(field):
            if field in attrs:
                return attrs[field]
            return getattr(self.instance, field) if self.instance is not None else Decimal('0.00')

        if current('discount_amount') > current('subtotal') + current('tax_amount'):
            raise serializers.ValidationError({
                'discount_amount': 'Discount cannot exceed the invoice amount'
            })
        return attrs

    def to_representation(self, instance):
        return InvoiceDetailSerializer(instance, context=self.context).data


class InvoiceStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=InvoiceStatus.choices)
