# apps/billing/tests.py

from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal
from unittest.mock import patch

from django.db import connection
from django.test import SimpleTestCase, TestCase, skipUnlessDBFeature
from django.test.utils import CaptureQueriesContext

from apps.clinics.models import Clinic
from apps.patients.models import Patient
from common.context import TenantContext
from common.exceptions import PaymentRejected
from common.testing import ClinicAPITestCase, create_member

from . import services
from .models import Invoice, InvoiceStatus, PaymentMethod
from .tasks import mark_overdue_invoices_task

DENTAL_ITEMS = [
    {'description': 'Cleaning', 'quantity': 1, 'unit_price': Decimal('80.00')},
    {'description': 'X-ray', 'quantity': 2, 'unit_price': Decimal('25.00')},
]


class DeriveStatusTestCase(SimpleTestCase):

    def test_paid_partial_and_untouched(self):
        self.assertEqual(services.derive_status(Decimal('100'), Decimal('100'), 'sent'), InvoiceStatus.PAID)
        self.assertEqual(services.derive_status(Decimal('100'), Decimal('40'), 'sent'), InvoiceStatus.PARTIAL)
        self.assertEqual(services.derive_status(Decimal('100'), Decimal('0'), 'draft'), 'draft')
        self.assertEqual(services.derive_status(Decimal('100'), Decimal('100'), 'cancelled'), 'cancelled')

    def test_invoice_numbers(self):
        self.assertEqual(services._base36(0), '0')
        self.assertEqual(services._base36(35), 'Z')
        self.assertEqual(services._base36(36), '10')


class InvoiceReconciliationTestCase(TestCase):

    def setUp(self):
        self.clinic = Clinic.objects.create(name='North Clinic', slug='north')
        self.ctx = TenantContext(clinic_id=self.clinic.id)
        self.patient = Patient.objects.create(clinic_id=self.clinic.id, first_name='Ana', last_name='Diaz')

    def _invoice(self, **kwargs):
        return services.create_invoice(self.ctx, self.patient, DENTAL_ITEMS, **kwargs)

    def test_create_computes_amounts(self):
        invoice = self._invoice()

        self.assertEqual(invoice.subtotal, Decimal('130.00'))
        self.assertEqual(invoice.total_amount, Decimal('130.00'))
        self.assertEqual(invoice.paid_amount, Decimal('0.00'))
        self.assertEqual(invoice.status, InvoiceStatus.DRAFT)
        self.assertTrue(invoice.invoice_number.startswith('INV-'))
        totals = sorted(item.total_price for item in invoice.items.all())
        self.assertEqual(totals, [Decimal('50.00'), Decimal('80.00')])

    def test_total_includes_tax_and_discount(self):
        invoice = self._invoice(tax_amount=Decimal('13.00'), discount_amount=Decimal('3.00'))
        self.assertEqual(invoice.total_amount, Decimal('140.00'))

        invoice = services.update_invoice(self.ctx, invoice.id, {'discount_amount': Decimal('20.00')})
        self.assertEqual(invoice.total_amount, invoice.subtotal + invoice.tax_amount - invoice.discount_amount)
        self.assertEqual(invoice.total_amount, Decimal('123.00'))

    def test_full_payment(self):
        invoice = self._invoice()

        services.record_payment(self.ctx, invoice.id, Decimal('130.00'), PaymentMethod.CASH)

        invoice.refresh_from_db()
        self.assertEqual(invoice.paid_amount, Decimal('130.00'))
        self.assertEqual(invoice.status, InvoiceStatus.PAID)
        self.assertEqual(invoice.balance_due, Decimal('0.00'))

    def test_half_payment(self):
        invoice = self._invoice()

        services.record_payment(self.ctx, invoice.id, Decimal('65.00'), PaymentMethod.CARD)

        invoice.refresh_from_db()
        self.assertEqual(invoice.paid_amount, Decimal('65.00'))
        self.assertEqual(invoice.status, InvoiceStatus.PARTIAL)
        self.assertEqual(services.balance_due(invoice), Decimal('65.00'))

    def test_payments_accumulate(self):
        invoice = self._invoice()
        for amount in ('30.00', '50.00', '50.00'):
            services.record_payment(self.ctx, invoice.id, Decimal(amount), PaymentMethod.CASH)

        invoice.refresh_from_db()
        self.assertEqual(invoice.paid_amount, Decimal('130.00'))
        self.assertEqual(invoice.status, InvoiceStatus.PAID)
        self.assertEqual(invoice.payments.count(), 3)

    @skipUnlessDBFeature('has_select_for_update')
    def test_payment_locks_invoice_row(self):
        invoice = self._invoice()

        with CaptureQueriesContext(connection) as queries:
            services.record_payment(self.ctx, invoice.id, Decimal('30.00'), PaymentMethod.CASH)

        locked = [
            q['sql'] for q in queries.captured_queries
            if 'FOR UPDATE' in q['sql'] and '"invoices"' in q['sql']
        ]
        self.assertEqual(len(locked), 1)

    def test_rejected_payments_leave_invoice_untouched(self):
        invoice = self._invoice()

        for amount in (Decimal('0'), Decimal('-5.00'), Decimal('130.01')):
            with self.assertRaises(PaymentRejected):
                services.record_payment(self.ctx, invoice.id, amount, PaymentMethod.CASH)

        invoice.refresh_from_db()
        self.assertEqual(invoice.paid_amount, Decimal('0.00'))
        self.assertEqual(invoice.payments.count(), 0)

    def test_cancelled_and_paid_invoices_reject_payments(self):
        cancelled = self._invoice()
        services.set_invoice_status(self.ctx, cancelled.id, InvoiceStatus.CANCELLED)
        with self.assertRaises(PaymentRejected):
            services.record_payment(self.ctx, cancelled.id, Decimal('10.00'), PaymentMethod.CASH)

        paid = self._invoice()
        services.record_payment(self.ctx, paid.id, Decimal('130.00'), PaymentMethod.CASH)
        with self.assertRaises(PaymentRejected):
            services.record_payment(self.ctx, paid.id, Decimal('1.00'), PaymentMethod.CASH)

    def test_verify_is_idempotent(self):
        invoice = self._invoice()
        payment = services.record_payment(self.ctx, invoice.id, Decimal('65.00'), PaymentMethod.CASH)
        verifier = create_member(self.clinic, first_name='Vera')

        first = services.verify_payment(self.ctx, payment.id, verifier=verifier)
        second = services.verify_payment(self.ctx, payment.id, verifier=create_member(self.clinic, first_name='Other'))

        self.assertTrue(second.is_verified)
        self.assertEqual(second.verified_by_id, verifier.id)
        self.assertEqual(second.verified_at, first.verified_at)
        invoice.refresh_from_db()
        self.assertEqual(invoice.paid_amount, Decimal('65.00'))
        self.assertEqual(invoice.status, InvoiceStatus.PARTIAL)
        self.assertEqual(services.pending_payments(self.ctx).count(), 0)

    def test_invoice_numbers_unique_per_clinic(self):
        numbers = {self._invoice().invoice_number for _ in range(3)}
        self.assertEqual(len(numbers), 3)

    def test_mark_overdue(self):
        today = date(2024, 6, 10)
        late = self._invoice(status=InvoiceStatus.SENT, due_date=date(2024, 6, 1))
        partial = self._invoice(status=InvoiceStatus.SENT, due_date=date(2024, 6, 9))
        services.record_payment(self.ctx, partial.id, Decimal('10.00'), PaymentMethod.CASH)
        not_due = self._invoice(status=InvoiceStatus.SENT, due_date=today)
        draft = self._invoice(due_date=date(2024, 6, 1))

        self.assertEqual(services.mark_overdue(self.ctx, today=today), 2)

        statuses = dict(Invoice.objects.values_list('id', 'status'))
        self.assertEqual(statuses[late.id], InvoiceStatus.OVERDUE)
        self.assertEqual(statuses[partial.id], InvoiceStatus.OVERDUE)
        self.assertEqual(statuses[not_due.id], InvoiceStatus.SENT)
        self.assertEqual(statuses[draft.id], InvoiceStatus.DRAFT)

    @patch('common.clock.now', return_value=datetime(2024, 6, 10, 1, 0, tzinfo=dt_timezone.utc))
    def test_overdue_task_covers_all_clinics(self, _now):
        late = self._invoice(status=InvoiceStatus.SENT, due_date=date(2024, 6, 1))
        other = Clinic.objects.create(name='South Clinic', slug='south')
        other_ctx = TenantContext(clinic_id=other.id)
        other_patient = Patient.objects.create(clinic_id=other.id, first_name='Bo', last_name='Lee')
        other_late = services.create_invoice(
            other_ctx, other_patient, DENTAL_ITEMS, status=InvoiceStatus.PARTIAL, due_date=date(2024, 6, 2)
        )

        result = mark_overdue_invoices_task.apply().get()

        self.assertEqual(result, {str(self.clinic.id): 1, str(other.id): 1})
        late.refresh_from_db()
        other_late.refresh_from_db()
        self.assertEqual(late.status, InvoiceStatus.OVERDUE)
        self.assertEqual(other_late.status, InvoiceStatus.OVERDUE)

    def test_other_clinic_cannot_pay(self):
        invoice = self._invoice()
        other = Clinic.objects.create(name='South Clinic', slug='south')
        with self.assertRaises(Invoice.DoesNotExist):
            services.record_payment(TenantContext(clinic_id=other.id), invoice.id, Decimal('5.00'), 'cash')


class BillingAPITestCase(ClinicAPITestCase):

    def setUp(self):
        super().setUp()
        self.patient = Patient.objects.create(clinic_id=self.clinic.id, first_name='Ana', last_name='Diaz')

    def _create_invoice(self, **overrides):
        payload = {
            'patient': str(self.patient.id),
            'items': [
                {'description': 'Cleaning', 'quantity': '1', 'unit_price': '80.00'},
                {'description': 'X-ray', 'quantity': '2', 'unit_price': '25.00'},
            ],
        }
        payload.update(overrides)
        return self.client.post('/api/billing/invoices/', payload, format='json')

    def test_create_invoice(self):
        response = self._create_invoice()

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['total_amount'], '130.00')
        self.assertEqual(response.data['status'], 'draft')
        self.assertEqual(len(response.data['items']), 2)

    def test_create_invoice_validation(self):
        self.assertEqual(self._create_invoice(items=[]).status_code, 400)
        self.assertEqual(self._create_invoice(discount_amount='500.00').status_code, 400)

    def test_update_cannot_discount_below_zero(self):
        invoice_id = self._create_invoice().data['id']
        url = f'/api/billing/invoices/{invoice_id}/'

        response = self.client.patch(url, {'discount_amount': '500.00'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('discount_amount', response.data)
        self.assertEqual(Invoice.objects.get(pk=invoice_id).total_amount, Decimal('130.00'))

        response = self.client.patch(url, {'discount_amount': '30.00'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['total_amount'], '100.00')

        # Lowering the subtotal under the stored discount is rejected too
        response = self.client.patch(url, {'subtotal': '10.00'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(Invoice.objects.get(pk=invoice_id).total_amount, Decimal('100.00'))

    def test_record_payment_through_invoice(self):
        invoice_id = self._create_invoice().data['id']

        response = self.client.post(
            f'/api/billing/invoices/{invoice_id}/payments/',
            {'amount': '65.00', 'payment_method': 'esewa'},
            format='json'
        )
        self.assertEqual(response.status_code, 201)

        detail = self.client.get(f'/api/billing/invoices/{invoice_id}/').data
        self.assertEqual(detail['status'], 'partial')
        self.assertEqual(detail['balance_due'], '65.00')
        self.assertEqual(len(detail['payments']), 1)

    def test_overpayment_rejected(self):
        invoice_id = self._create_invoice().data['id']

        response = self.client.post('/api/billing/payments/', {
            'invoice': invoice_id, 'amount': '200.00', 'payment_method': 'cash'
        }, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.data['success'])
        self.assertIn('balance due', response.data['error'])

    def test_verify_payment(self):
        invoice_id = self._create_invoice().data['id']
        payment = self.client.post('/api/billing/payments/', {
            'invoice': invoice_id, 'amount': '130.00', 'payment_method': 'card'
        }, format='json').data

        self.assertEqual(self.client.get('/api/billing/payments/pending/').data['count'], 1)

        response = self.client.post(f"/api/billing/payments/{payment['id']}/verify/")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['data']['is_verified'])
        self.assertEqual(str(response.data['data']['verified_by']), str(self.profile.id))
        self.assertEqual(self.client.get('/api/billing/payments/pending/').data['count'], 0)

    def test_set_status(self):
        invoice_id = self._create_invoice().data['id']
        response = self.client.post(f'/api/billing/invoices/{invoice_id}/status/', {'status': 'sent'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data']['status'], 'sent')

    def test_foreign_invoice_rejected_on_payment(self):
        other = Clinic.objects.create(name='Other', slug='other-billing')
        other_ctx = TenantContext(clinic_id=other.id)
        other_patient = Patient.objects.create(clinic_id=other.id, first_name='Bo', last_name='Lee')
        foreign = services.create_invoice(other_ctx, other_patient, DENTAL_ITEMS)

        response = self.client.post('/api/billing/payments/', {
            'invoice': str(foreign.id), 'amount': '10.00', 'payment_method': 'cash'
        }, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertIn('invoice', response.data)
