# billing/models.py
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from common.models import ClinicScopedModel


class InvoiceStatus(models.TextChoices):
    DRAFT = 'draft', 'Draft'
    SENT = 'sent', 'Sent'
    PAID = 'paid', 'Paid'
    PARTIAL = 'partial', 'Partially Paid'
    OVERDUE = 'overdue', 'Overdue'
    CANCELLED = 'cancelled', 'Cancelled'


class PaymentMethod(models.TextChoices):
    CASH = 'cash', 'Cash'
    CARD = 'card', 'Card'
    BANK_TRANSFER = 'bank_transfer', 'Bank Transfer'
    ESEWA = 'esewa', 'eSewa'
    KHALTI = 'khalti', 'Khalti'
    INSURANCE = 'insurance', 'Insurance'
    OTHER = 'other', 'Other'


# Invoices that still expect money from the patient
OUTSTANDING_STATUSES = (InvoiceStatus.SENT, InvoiceStatus.PARTIAL, InvoiceStatus.OVERDUE)


class Invoice(ClinicScopedModel):
    """
    Invoice Model - amounts billed to a patient.

    total_amount is kept equal to subtotal + tax_amount - discount_amount;
    paid_amount is the running sum of recorded payments and status is
    derived from the two whenever a payment is applied.
    """

    patient = models.ForeignKey(
        'patients.Patient',
        on_delete=models.PROTECT,
        related_name='invoices'
    )
    invoice_number = models.CharField(max_length=50)
    status = models.CharField(
        max_length=20,
        choices=InvoiceStatus.choices,
        default=InvoiceStatus.DRAFT
    )

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    due_date = models.DateField(null=True, blank=True)
    notes = models.TextField(null=True, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'invoices'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['clinic_id', 'status'], name='invoices_clinic_status_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['clinic_id', 'invoice_number'],
                name='unique_invoice_number_per_clinic'
            ),
        ]

    def __str__(self):
        return f"{self.invoice_number} - {self.patient}"

    @property
    def balance_due(self):
        return max(Decimal('0.00'), self.total_amount - self.paid_amount)

    def calculate_total(self):
        return self.subtotal + self.tax_amount - self.discount_amount


class InvoiceItem(models.Model):
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='items')
    description = models.CharField(max_length=255)
    quantity = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal('1'),
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    unit_price = models.DecimalField(
        max_digits=12, decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    total_price = models.DecimalField(max_digits=12, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'invoice_items'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.description} x {self.quantity}"

    def save(self, *args, **kwargs):
        self.total_price = self.quantity * self.unit_price
        super().save(*args, **kwargs)


class Payment(ClinicScopedModel):
    """
    Payment Model - money received against an invoice.

    Verification is an audit flag on an already-applied payment and never
    changes invoice totals.
    """

    invoice = models.ForeignKey(Invoice, on_delete=models.PROTECT, related_name='payments')
    patient = models.ForeignKey(
        'patients.Patient',
        on_delete=models.PROTECT,
        related_name='payments'
    )
    amount = models.DecimalField(
        max_digits=12, decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    payment_date = models.DateTimeField(default=timezone.now)
    reference_number = models.CharField(max_length=100, null=True, blank=True)
    proof_url = models.URLField(max_length=500, null=True, blank=True)

    is_verified = models.BooleanField(default=False)
    verified_by = models.ForeignKey(
        'clinics.Profile',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='verified_payments'
    )
    verified_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(null=True, blank=True)

    class Meta:
        db_table = 'payments'
        ordering = ['-payment_date']
        indexes = [
            models.Index(fields=['clinic_id', 'payment_date'], name='payments_clinic_date_idx'),
            models.Index(fields=['clinic_id', 'is_verified'], name='payments_clinic_verified_idx'),
        ]

    def __str__(self):
        return f"{self.invoice.invoice_number} - {self.amount} ({self.payment_method})"
