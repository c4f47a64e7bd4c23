from decimal import Decimal

from django.contrib import admin
from common.admin_site import TenantModelAdmin
from .models import Invoice, InvoiceItem, Payment


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    fields = ['description', 'quantity', 'unit_price', 'total_price']
    readonly_fields = ['total_price']


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    fields = ['amount', 'payment_method', 'payment_date', 'is_verified', 'verified_at']
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        # Payments must go through the API so the invoice totals follow
        return False


@admin.register(Invoice)
class InvoiceAdmin(TenantModelAdmin):
    list_display = [
        'invoice_number', 'patient', 'status', 'total_amount',
        'paid_amount', 'balance_due', 'due_date', 'created_at'
    ]
    list_filter = ['status', 'due_date']
    search_fields = ['invoice_number', 'patient__first_name', 'patient__last_name']
    raw_id_fields = ['patient']
    readonly_fields = ['id', 'subtotal', 'total_amount', 'paid_amount', 'created_at', 'updated_at']
    inlines = [InvoiceItemInline, PaymentInline]

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        invoice = form.instance
        invoice.subtotal = sum((item.total_price for item in invoice.items.all()), Decimal('0.00'))
        invoice.total_amount = invoice.calculate_total()
        invoice.save(update_fields=['subtotal', 'total_amount', 'updated_at'])


@admin.register(Payment)
class PaymentAdmin(TenantModelAdmin):
    list_display = ['invoice', 'patient', 'amount', 'payment_method', 'payment_date', 'is_verified']
    list_filter = ['payment_method', 'is_verified']
    search_fields = ['reference_number', 'invoice__invoice_number']
    readonly_fields = [
        'id', 'invoice', 'patient', 'amount', 'payment_method', 'payment_date',
        'is_verified', 'verified_by', 'verified_at', 'created_at'
    ]

    def has_add_permission(self, request):
        return False
