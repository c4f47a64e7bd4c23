# apps/dashboard/tests.py

from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from decimal import Decimal
from unittest.mock import patch

from django.core.cache import cache
from django.db import connection, transaction
from django.test import TestCase, TransactionTestCase

from apps.appointments.models import Appointment, AppointmentStatus
from apps.billing import services as billing
from apps.billing.models import Invoice, InvoiceStatus, PaymentMethod
from apps.clinics.models import Clinic
from apps.inventory import services as inventory
from apps.inventory.models import InventoryItem, StockOperation
from apps.patients.models import Patient
from common.context import TenantContext
from common.testing import ClinicAPITestCase

from . import aggregates
from .cache import clinic_version

NOW = datetime(2024, 6, 3, 10, 0, tzinfo=dt_timezone.utc)
TODAY = date(2024, 6, 3)


def _appointment(clinic_id, patient, day=TODAY, status=AppointmentStatus.SCHEDULED, start=time(9, 0)):
    return Appointment.objects.create(
        clinic_id=clinic_id,
        patient=patient,
        title='Check-up',
        status=status,
        scheduled_date=day,
        start_time=start,
        end_time=time(start.hour, 30),
    )


@patch('common.clock.now', return_value=NOW)
class AggregatesTestCase(TestCase):
    """Rollups are computed in the database from the clinic's rows only"""

    def setUp(self):
        self.clinic = Clinic.objects.create(name='North Clinic', slug='north')
        self.ctx = TenantContext(clinic_id=self.clinic.id)
        self.patient = Patient.objects.create(clinic_id=self.clinic.id, first_name='Ana', last_name='Diaz')

        other = Clinic.objects.create(name='South Clinic', slug='south')
        self.other_ctx = TenantContext(clinic_id=other.id)
        outsider = Patient.objects.create(clinic_id=other.id, first_name='Bo', last_name='Lee')
        _appointment(other.id, outsider)

    def _invoice(self, total, status=InvoiceStatus.SENT):
        return billing.create_invoice(
            self.ctx, self.patient,
            [{'description': 'Cleaning', 'quantity': 1, 'unit_price': Decimal(total)}],
            status=status,
        )

    def test_today_counts(self, _now):
        _appointment(self.clinic.id, self.patient)
        _appointment(self.clinic.id, self.patient, status=AppointmentStatus.COMPLETED, start=time(10, 0))
        _appointment(self.clinic.id, self.patient, day=TODAY + timedelta(days=1))
        Patient.objects.create(clinic_id=self.clinic.id, first_name='Gone', last_name='Away', is_active=False)

        self.assertEqual(aggregates.today_appointment_count(self.ctx), 2)
        self.assertEqual(aggregates.active_patient_count(self.ctx), 1)

        statuses = aggregates.appointment_status_counts(self.ctx)
        self.assertEqual(set(statuses), set(AppointmentStatus.values))
        self.assertEqual(statuses['scheduled'], 1)
        self.assertEqual(statuses['completed'], 1)
        self.assertEqual(statuses['no_show'], 0)

    def test_today_revenue_uses_local_day(self, _now):
        invoice = self._invoice('200.00')
        billing.record_payment(self.ctx, invoice.id, Decimal('50.00'), PaymentMethod.CASH,
                               payment_date=NOW - timedelta(hours=2))
        billing.record_payment(self.ctx, invoice.id, Decimal('30.00'), PaymentMethod.CARD,
                               payment_date=NOW - timedelta(days=1))

        self.assertEqual(aggregates.today_revenue(self.ctx), Decimal('50.00'))

    def test_outstanding_balance_skips_draft_paid_and_cancelled(self, _now):
        partial = self._invoice('100.00')
        billing.record_payment(self.ctx, partial.id, Decimal('40.00'), PaymentMethod.CASH)
        self._invoice('25.00', status=InvoiceStatus.OVERDUE)
        self._invoice('999.00', status=InvoiceStatus.DRAFT)
        self._invoice('500.00', status=InvoiceStatus.CANCELLED)
        paid = self._invoice('10.00')
        billing.record_payment(self.ctx, paid.id, Decimal('10.00'), PaymentMethod.CASH)

        self.assertEqual(aggregates.outstanding_balance(self.ctx), Decimal('85.00'))

    def test_low_stock_count(self, _now):
        InventoryItem.objects.create(clinic_id=self.clinic.id, name='Gloves', quantity=3, min_quantity=10)
        InventoryItem.objects.create(clinic_id=self.clinic.id, name='Masks', quantity=30, min_quantity=10)
        InventoryItem.objects.create(clinic_id=self.clinic.id, name='Old', quantity=0, is_active=False)

        self.assertEqual(aggregates.low_stock_count(self.ctx), 1)

    def test_revenue_windows(self, _now):
        invoice = self._invoice('1000.00')
        for days_ago, amount, method in [
            (0, '10.00', PaymentMethod.CASH),
            (0, '15.00', PaymentMethod.CARD),
            (2, '20.00', PaymentMethod.CASH),
            (10, '40.00', PaymentMethod.INSURANCE),
            (45, '80.00', PaymentMethod.CASH),
        ]:
            billing.record_payment(self.ctx, invoice.id, Decimal(amount), method,
                                   payment_date=NOW - timedelta(days=days_ago))

        by_day = aggregates.revenue_by_day(self.ctx, days=7)
        self.assertEqual(by_day, [
            {'date': '2024-06-01', 'amount': Decimal('20.00')},
            {'date': '2024-06-03', 'amount': Decimal('25.00')},
        ])

        by_method = {row['method']: row['amount'] for row in aggregates.revenue_by_method(self.ctx, days=30)}
        self.assertEqual(by_method, {
            'cash': Decimal('30.00'),
            'insurance': Decimal('40.00'),
            'card': Decimal('15.00'),
        })

    def test_recent_patients(self, _now):
        for index in range(6):
            Patient.objects.create(clinic_id=self.clinic.id, first_name=f'P{index}', last_name='New')

        recent = aggregates.recent_patients(self.ctx)
        self.assertEqual(len(recent), 5)
        self.assertTrue(all(row['last_name'] == 'New' for row in recent))

    def test_no_clinic_is_empty(self, _now):
        ctx = TenantContext(clinic_id=None)
        stats = aggregates.dashboard_stats(ctx)
        self.assertEqual(stats['today_appointments'], 0)
        self.assertEqual(stats['total_patients'], 0)
        self.assertEqual(stats['pending_amount'], Decimal('0.00'))


@patch('common.clock.now', return_value=NOW)
class DashboardAPITestCase(ClinicAPITestCase):

    def setUp(self):
        super().setUp()
        self.patient = Patient.objects.create(clinic_id=self.clinic.id, first_name='Ana', last_name='Diaz')

    def test_stats(self, _now):
        _appointment(self.clinic.id, self.patient)

        response = self.client.get('/api/dashboard/stats/')

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data']['today_appointments'], 1)
        self.assertEqual(response.data['data']['total_patients'], 1)

    def test_writes_invalidate_cached_stats(self, _now):
        self.assertEqual(self.client.get('/api/dashboard/stats/').data['data']['today_appointments'], 0)

        with self.captureOnCommitCallbacks(execute=True):
            appointment = _appointment(self.clinic.id, self.patient)
        self.assertEqual(self.client.get('/api/dashboard/stats/').data['data']['today_appointments'], 1)

        with self.captureOnCommitCallbacks(execute=True):
            appointment.delete()
        self.assertEqual(self.client.get('/api/dashboard/stats/').data['data']['today_appointments'], 0)

    def test_bulk_update_without_invalidation_serves_cache(self, _now):
        _appointment(self.clinic.id, self.patient)
        first = self.client.get('/api/dashboard/stats/').data['data']['appointment_statuses']
        self.assertEqual(first['scheduled'], 1)

        Appointment.objects.filter(clinic_id=self.clinic.id).update(status=AppointmentStatus.CONFIRMED)

        cached = self.client.get('/api/dashboard/stats/').data['data']['appointment_statuses']
        self.assertEqual(cached['scheduled'], 1)

    def test_stock_adjustment_invalidates_low_stock_count(self, _now):
        item = InventoryItem.objects.create(clinic_id=self.clinic.id, name='Gloves', quantity=3, min_quantity=10)
        self.assertEqual(self.client.get('/api/dashboard/stats/').data['data']['low_stock_count'], 1)

        with self.captureOnCommitCallbacks(execute=True):
            inventory.adjust_stock(self.ctx, item.id, StockOperation.ADD, 10)

        self.assertEqual(self.client.get('/api/dashboard/stats/').data['data']['low_stock_count'], 0)

    def test_payment_invalidates_revenue(self, _now):
        invoice = billing.create_invoice(
            self.ctx, self.patient,
            [{'description': 'X-ray', 'quantity': 2, 'unit_price': Decimal('25.00')}],
            status=InvoiceStatus.SENT,
        )
        self.assertEqual(self.client.get('/api/dashboard/revenue/').data['count'], 0)

        with self.captureOnCommitCallbacks(execute=True):
            billing.record_payment(self.ctx, invoice.id, Decimal('50.00'), PaymentMethod.CASH)

        response = self.client.get('/api/dashboard/revenue/')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['data'][0]['amount'], Decimal('50.00'))
        self.assertEqual(Invoice.objects.get(pk=invoice.id).status, InvoiceStatus.PAID)

    def test_clinics_have_separate_caches(self, _now):
        self.client.get('/api/dashboard/stats/')

        other = Clinic.objects.create(name='Other', slug='other-dash')
        with self.captureOnCommitCallbacks(execute=True):
            Patient.objects.create(clinic_id=other.id, first_name='Bo', last_name='Lee')

        # The other clinic's write must not leak into this clinic's figures
        self.assertEqual(self.client.get('/api/dashboard/stats/').data['data']['total_patients'], 1)

    def test_payment_methods_and_recent_patients(self, _now):
        response = self.client.get('/api/dashboard/payment-methods/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['count'], 0)

        response = self.client.get('/api/dashboard/recent-patients/?limit=1')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data'][0]['first_name'], 'Ana')

    def test_bad_window_rejected(self, _now):
        response = self.client.get('/api/dashboard/revenue/?days=-3')
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.data['success'])

    def test_requires_token(self, _now):
        self.client.credentials()
        response = self.client.get('/api/dashboard/stats/')
        self.assertEqual(response.status_code, 401)


class InvalidationOnCommitTestCase(TransactionTestCase):
    """Cache versions move only after the writing transaction commits"""

    def setUp(self):
        cache.clear()
        self.clinic = Clinic.objects.create(name='North Clinic', slug='north')
        self.ctx = TenantContext(clinic_id=self.clinic.id)
        self.patient = Patient.objects.create(clinic_id=self.clinic.id, first_name='Ana', last_name='Diaz')

    def _recorder(self):
        calls = []

        def record(clinic_id):
            calls.append((clinic_id, connection.in_atomic_block))
        return calls, record

    def test_payment_invalidates_after_commit(self):
        invoice = billing.create_invoice(
            self.ctx, self.patient,
            [{'description': 'Cleaning', 'quantity': 1, 'unit_price': Decimal('80.00')}],
            status=InvoiceStatus.SENT,
        )
        calls, record = self._recorder()

        with patch('apps.dashboard.signals.invalidate_clinic', side_effect=record):
            billing.record_payment(self.ctx, invoice.id, Decimal('30.00'), PaymentMethod.CASH)

        self.assertTrue(calls)
        self.assertEqual(calls, [(self.clinic.id, False)] * len(calls))

    def test_stock_adjustment_invalidates_after_commit(self):
        item = InventoryItem.objects.create(clinic_id=self.clinic.id, name='Gloves', quantity=3)
        calls, record = self._recorder()

        with patch('apps.inventory.services.invalidate_clinic', side_effect=record):
            inventory.adjust_stock(self.ctx, item.id, StockOperation.ADD, 5)

        self.assertEqual(calls, [(self.clinic.id, False)])

    def test_rolled_back_write_keeps_version(self):
        version = clinic_version(self.clinic.id)

        with self.assertRaises(RuntimeError):
            with transaction.atomic():
                Patient.objects.create(clinic_id=self.clinic.id, first_name='Cy', last_name='Roe')
                raise RuntimeError('abort')

        self.assertEqual(clinic_version(self.clinic.id), version)
