"""
Invoice and payment reconciliation.

Payments are applied inside a transaction that holds a row lock on the
invoice, so concurrent payments against one invoice serialize and each
sees the paid_amount left by the previous one.
"""
import logging
import time
from decimal import Decimal

from django.db import IntegrityError, transaction

from common import clock
from common.context import TenantContext
from common.exceptions import PaymentRejected

from .models import Invoice, InvoiceItem, InvoiceStatus, OUTSTANDING_STATUSES, Payment

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')
INVOICE_NUMBER_ATTEMPTS = 5


def balance_due(invoice) -> Decimal:
    return max(ZERO, invoice.total_amount - invoice.paid_amount)


def derive_status(total_amount, paid_amount, current_status):
    """
    Invoice status implied by the amounts.

    Cancelled invoices stay cancelled. Any positive payment makes the
    invoice partial, and paid once it covers the total; with nothing paid
    the current status is kept.
    """
    if current_status == InvoiceStatus.CANCELLED:
        return current_status
    if paid_amount > ZERO and paid_amount >= total_amount:
        return InvoiceStatus.PAID
    if paid_amount > ZERO:
        return InvoiceStatus.PARTIAL
    return current_status


def _base36(number):
    digits = '0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ'
    encoded = ''
    while number:
        number, remainder = divmod(number, 36)
        encoded = digits[remainder] + encoded
    return encoded or '0'


def generate_invoice_number(clinic_id) -> str:
    """``INV-<base36 millisecond timestamp>``, suffixed until unique in the clinic."""
    base = f"INV-{_base36(int(time.time() * 1000))}"
    candidate = base
    suffix = 1
    while Invoice.objects.filter(clinic_id=clinic_id, invoice_number=candidate).exists():
        suffix += 1
        candidate = f"{base}-{suffix}"
    return candidate


# ---------------------------------------------------------------------------
# Invoices
# ---------------------------------------------------------------------------

def list_invoices(ctx: TenantContext):
    return Invoice.objects.for_clinic(ctx).select_related('patient').order_by('-created_at')


def get_invoice_detail(ctx: TenantContext, invoice_id) -> Invoice:
    """Invoice with its items and its payments newest first."""
    invoice = Invoice.objects.for_clinic(ctx).select_related('patient').get(pk=invoice_id)
    invoice.item_list = list(invoice.items.all())
    invoice.payment_list = list(invoice.payments.order_by('-payment_date'))
    return invoice


def create_invoice(ctx: TenantContext, patient, items, tax_amount=ZERO, discount_amount=ZERO,
                   due_date=None, notes=None, status=InvoiceStatus.DRAFT) -> Invoice:
    """
    Create an invoice and its line items in one transaction.

    ``items`` is a sequence of dicts with description, quantity and
    unit_price; subtotal and total are computed here.
    """
    clinic_id = ctx.require_clinic()
    tax_amount = tax_amount or ZERO
    discount_amount = discount_amount or ZERO

    subtotal = sum((Decimal(item['quantity']) * Decimal(item['unit_price']) for item in items), ZERO)

    for attempt in range(INVOICE_NUMBER_ATTEMPTS):
        try:
            with transaction.atomic():
                invoice = Invoice.objects.create(
                    clinic_id=clinic_id,
                    patient=patient,
                    invoice_number=generate_invoice_number(clinic_id),
                    status=status,
                    subtotal=subtotal,
                    tax_amount=tax_amount,
                    discount_amount=discount_amount,
                    total_amount=subtotal + tax_amount - discount_amount,
                    paid_amount=ZERO,
                    due_date=due_date,
                    notes=notes,
                )
                for item in items:
                    InvoiceItem.objects.create(
                        invoice=invoice,
                        description=item['description'],
                        quantity=item['quantity'],
                        unit_price=item['unit_price'],
                    )
            break
        except IntegrityError:
            # Another invoice took the number between the check and the insert
            if attempt == INVOICE_NUMBER_ATTEMPTS - 1:
                raise
            logger.warning(f"Invoice number collision, retrying - Clinic: {clinic_id}")

    logger.info(
        f"Invoice created - Number: {invoice.invoice_number}, Total: {invoice.total_amount}, "
        f"Clinic: {clinic_id}"
    )
    return invoice


def update_invoice(ctx: TenantContext, invoice_id, data) -> Invoice:
    """Partial update; total_amount always follows subtotal, tax and discount."""
    ctx.require_clinic()
    with transaction.atomic():
        invoice = Invoice.objects.for_clinic(ctx).select_for_update().get(pk=invoice_id)
        for field, value in data.items():
            setattr(invoice, field, value)
        invoice.total_amount = invoice.calculate_total()
        if 'status' not in data:
            invoice.status = derive_status(invoice.total_amount, invoice.paid_amount, invoice.status)
        invoice.save()
    return invoice


def set_invoice_status(ctx: TenantContext, invoice_id, status) -> Invoice:
    ctx.require_clinic()
    status = InvoiceStatus(status)
    with transaction.atomic():
        invoice = Invoice.objects.for_clinic(ctx).select_for_update().get(pk=invoice_id)
        invoice.status = status
        invoice.save(update_fields=['status', 'updated_at'])
    logger.info(f"Invoice status set - Number: {invoice.invoice_number}, Status: {status}")
    return invoice


def mark_overdue(ctx: TenantContext, today=None) -> int:
    """Flag sent/partial invoices past their due date that still have a balance."""
    ctx.require_clinic()
    today = today or clock.today()
    overdue = 0
    with transaction.atomic():
        candidates = Invoice.objects.for_clinic(ctx).select_for_update().filter(
            status__in=[InvoiceStatus.SENT, InvoiceStatus.PARTIAL],
            due_date__lt=today,
        )
        for invoice in candidates:
            if balance_due(invoice) > ZERO:
                invoice.status = InvoiceStatus.OVERDUE
                invoice.save(update_fields=['status', 'updated_at'])
                overdue += 1
    if overdue:
        logger.info(f"Marked {overdue} invoice(s) overdue - Clinic: {ctx.clinic_id}")
    return overdue


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------

def list_payments(ctx: TenantContext):
    return Payment.objects.for_clinic(ctx).select_related(
        'patient', 'invoice', 'verified_by'
    ).order_by('-payment_date')


def pending_payments(ctx: TenantContext):
    return list_payments(ctx).filter(is_verified=False)


def record_payment(ctx: TenantContext, invoice_id, amount, payment_method, payment_date=None,
                   reference_number=None, proof_url=None, notes=None) -> Payment:
    """
    Apply a payment to an invoice.

    Rejects non-positive amounts, amounts above the balance due and
    payments against cancelled or fully paid invoices. The invoice row is
    locked for the whole read-modify-write.
    """
    clinic_id = ctx.require_clinic()
    amount = Decimal(amount)
    if amount <= ZERO:
        raise PaymentRejected('Payment amount must be greater than zero')

    with transaction.atomic():
        invoice = Invoice.objects.for_clinic(ctx).select_for_update().get(pk=invoice_id)

        if invoice.status == InvoiceStatus.CANCELLED:
            raise PaymentRejected('Cannot record a payment against a cancelled invoice')

        outstanding = balance_due(invoice)
        if outstanding <= ZERO:
            raise PaymentRejected('Invoice is already fully paid')
        if amount > outstanding:
            raise PaymentRejected(f'Payment amount exceeds the balance due of {outstanding}')

        payment = Payment.objects.create(
            clinic_id=clinic_id,
            invoice=invoice,
            patient_id=invoice.patient_id,
            amount=amount,
            payment_method=payment_method,
            payment_date=payment_date or clock.now(),
            reference_number=reference_number,
            proof_url=proof_url,
            notes=notes,
        )

        invoice.paid_amount = invoice.paid_amount + amount
        invoice.status = derive_status(invoice.total_amount, invoice.paid_amount, invoice.status)
        invoice.save(update_fields=['paid_amount', 'status', 'updated_at'])

    logger.info(
        f"Payment recorded - Invoice: {invoice.invoice_number}, Amount: {amount}, "
        f"Method: {payment_method}, Paid: {invoice.paid_amount}/{invoice.total_amount}, "
        f"Status: {invoice.status}"
    )
    return payment


def verify_payment(ctx: TenantContext, payment_id, verifier=None) -> Payment:
    """
    Mark a payment verified by ``verifier`` (a Profile).

    Repeat calls keep the first verifier and timestamp; the invoice is
    never touched.
    """
    ctx.require_clinic()
    with transaction.atomic():
        payment = Payment.objects.for_clinic(ctx).select_for_update().get(pk=payment_id)
        if payment.is_verified:
            return payment

        payment.is_verified = True
        payment.verified_by = verifier
        payment.verified_at = clock.now()
        payment.save(update_fields=['is_verified', 'verified_by', 'verified_at'])

    logger.info(f"Payment verified - Id: {payment.id}, By: {ctx.user_id}")
    return payment
