# apps/inventory/tests.py

from datetime import date, timedelta
from decimal import Decimal

from django.db import connection
from django.test import TestCase
from django.test.utils import CaptureQueriesContext

from apps.clinics.models import Clinic
from common.context import TenantContext
from common.exceptions import StockAdjustmentError, TenantRequired
from common.testing import ClinicAPITestCase, create_member

from . import services
from .models import InventoryCategory, InventoryItem, StockOperation
from .tasks import expiring_items_report_task


class AdjustStockServiceTestCase(TestCase):
    """Stock ledger rules"""

    def setUp(self):
        self.clinic = Clinic.objects.create(name='North Clinic', slug='north')
        self.ctx = TenantContext(clinic_id=self.clinic.id)
        self.item = InventoryItem.objects.create(
            clinic_id=self.clinic.id, name='Gloves', quantity=20, min_quantity=5
        )

    def test_add(self):
        item = services.adjust_stock(self.ctx, self.item.id, StockOperation.ADD, 5)
        self.assertEqual(item.quantity, 25)

    def test_subtract_floors_at_zero(self):
        item = services.adjust_stock(self.ctx, self.item.id, StockOperation.SUBTRACT, 50)
        self.assertEqual(item.quantity, 0)

    def test_set(self):
        item = services.adjust_stock(self.ctx, self.item.id, 'set', 3)
        self.assertEqual(item.quantity, 3)
        self.assertTrue(item.is_low_stock)

    def test_sequential_adjustments_accumulate(self):
        services.adjust_stock(self.ctx, self.item.id, StockOperation.ADD, 10)
        services.adjust_stock(self.ctx, self.item.id, StockOperation.SUBTRACT, 4)
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, 26)

    def test_adjustment_is_one_conditional_update(self):
        with CaptureQueriesContext(connection) as queries:
            services.adjust_stock(self.ctx, self.item.id, StockOperation.SUBTRACT, 4)

        statements = [q['sql'] for q in queries.captured_queries]
        updates = [i for i, sql in enumerate(statements) if sql.startswith('UPDATE "inventory_items"')]
        self.assertEqual(len(updates), 1)
        # The new quantity is computed from the stored column, not from a prior read
        self.assertGreaterEqual(statements[updates[0]].count('"quantity"'), 2)
        reads_before = [
            sql for sql in statements[:updates[0]]
            if sql.startswith('SELECT') and '"inventory_items"' in sql
        ]
        self.assertEqual(reads_before, [])

    def test_negative_amount_rejected(self):
        with self.assertRaises(StockAdjustmentError):
            services.adjust_stock(self.ctx, self.item.id, StockOperation.ADD, -1)

    def test_unknown_operation_rejected(self):
        with self.assertRaises(StockAdjustmentError):
            services.adjust_stock(self.ctx, self.item.id, 'multiply', 2)

    def test_other_clinic_item_not_found(self):
        other = Clinic.objects.create(name='South Clinic', slug='south')
        with self.assertRaises(InventoryItem.DoesNotExist):
            services.adjust_stock(TenantContext(clinic_id=other.id), self.item.id, StockOperation.ADD, 1)
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, 20)

    def test_requires_clinic(self):
        with self.assertRaises(TenantRequired):
            services.adjust_stock(TenantContext(clinic_id=None), self.item.id, StockOperation.ADD, 1)


class StockDerivationTestCase(TestCase):
    """Low stock and expiry are computed, never stored"""

    def setUp(self):
        self.clinic = Clinic.objects.create(name='North Clinic', slug='north')
        self.ctx = TenantContext(clinic_id=self.clinic.id)
        self.today = date(2025, 6, 1)

    def _item(self, name, **kwargs):
        return InventoryItem.objects.create(clinic_id=self.clinic.id, name=name, **kwargs)

    def test_low_stock_boundary(self):
        self._item('At threshold', quantity=10, min_quantity=10)
        self._item('Above threshold', quantity=11, min_quantity=10)
        self._item('Inactive', quantity=0, min_quantity=10, is_active=False)

        names = [item.name for item in services.low_stock_items(self.ctx)]
        self.assertEqual(names, ['At threshold'])

    def test_expiring_includes_past_and_window_edge(self):
        self._item('Expired', expiry_date=self.today - timedelta(days=3))
        self._item('Edge', expiry_date=self.today + timedelta(days=30))
        self._item('Later', expiry_date=self.today + timedelta(days=31))
        self._item('No expiry')

        names = [item.name for item in services.expiring_items(self.ctx, days=30, today=self.today)]
        self.assertEqual(names, ['Expired', 'Edge'])

    def test_expired_excludes_today(self):
        self._item('Yesterday', expiry_date=self.today - timedelta(days=1))
        self._item('Today', expiry_date=self.today)

        names = [item.name for item in services.expired_items(self.ctx, today=self.today)]
        self.assertEqual(names, ['Yesterday'])

    def test_statistics(self):
        self._item('Gloves', quantity=4, min_quantity=5, unit_cost=Decimal('2.50'))
        self._item('Masks', quantity=100, unit_cost=Decimal('0.10'), expiry_date=self.today + timedelta(days=5))

        stats = services.inventory_statistics(self.ctx, days=30, today=self.today)
        self.assertEqual(stats['total_items'], 2)
        self.assertEqual(stats['total_quantity'], 104)
        self.assertEqual(Decimal(stats['stock_value']), Decimal('20.00'))
        self.assertEqual(stats['low_stock_count'], 1)
        self.assertEqual(stats['expiring_count'], 1)
        self.assertEqual(stats['expired_count'], 0)


class ExpiringItemsReportTaskTestCase(TestCase):

    def test_reports_per_clinic(self):
        clinic = Clinic.objects.create(name='North Clinic', slug='north')
        InventoryItem.objects.create(clinic_id=clinic.id, name='Gloves', quantity=1, min_quantity=5)
        InventoryItem.objects.create(clinic_id=clinic.id, name='Masks', quantity=50, min_quantity=5)

        result = expiring_items_report_task.apply().get()

        self.assertIn(str(clinic.id), result)
        self.assertEqual(result[str(clinic.id)]['low_stock'], 1)


class InventoryAPITestCase(ClinicAPITestCase):

    def setUp(self):
        super().setUp()
        self.category = InventoryCategory.objects.create(clinic_id=self.clinic.id, name='Consumables')
        self.item = InventoryItem.objects.create(
            clinic_id=self.clinic.id, category=self.category, name='Gloves',
            quantity=20, min_quantity=5, unit_cost=Decimal('1.00')
        )

    def test_create_item_stamps_clinic(self):
        response = self.client.post('/api/inventory/items/', {
            'name': 'Syringes',
            'category': str(self.category.id),
            'quantity': 40,
            'min_quantity': 10,
        }, format='json')

        self.assertEqual(response.status_code, 201)
        item = InventoryItem.objects.get(pk=response.data['id'])
        self.assertEqual(item.clinic_id, self.clinic.id)

    def test_create_item_rejects_foreign_category(self):
        other = Clinic.objects.create(name='Other', slug='other-inv')
        foreign = InventoryCategory.objects.create(clinic_id=other.id, name='Foreign')

        response = self.client.post('/api/inventory/items/', {
            'name': 'Syringes',
            'category': str(foreign.id),
        }, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertIn('category', response.data)

    def test_adjust_stock_endpoint(self):
        response = self.client.post(
            f'/api/inventory/items/{self.item.id}/adjust_stock/',
            {'operation': 'subtract', 'amount': 25},
            format='json'
        )

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data']['quantity'], 0)

    def test_quantity_not_editable_through_update(self):
        response = self.client.patch(
            f'/api/inventory/items/{self.item.id}/', {'quantity': 99}, format='json'
        )
        self.assertEqual(response.status_code, 400)
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, 20)

    def test_destroy_is_soft_delete(self):
        response = self.client.delete(f'/api/inventory/items/{self.item.id}/')

        self.assertEqual(response.status_code, 204)
        self.item.refresh_from_db()
        self.assertFalse(self.item.is_active)

        listing = self.client.get('/api/inventory/items/')
        self.assertEqual(listing.data['count'], 0)

    def test_low_stock_endpoint(self):
        InventoryItem.objects.create(clinic_id=self.clinic.id, name='Masks', quantity=2, min_quantity=5)

        response = self.client.get('/api/inventory/items/low_stock/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['data'][0]['name'], 'Masks')

    def test_expiring_rejects_bad_days(self):
        response = self.client.get('/api/inventory/items/expiring/?days=soon')
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.data['success'])

        response = self.client.get('/api/inventory/items/expiring/?days=-5')
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.data['success'])

        self.assertEqual(self.client.get('/api/inventory/items/expiring/?days=0').status_code, 200)

    def test_duplicate_category_name(self):
        response = self.client.post('/api/inventory/categories/', {'name': 'consumables'}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_other_clinic_items_hidden(self):
        other = Clinic.objects.create(name='Other', slug='other-inv')
        outsider = create_member(other, first_name='Out', last_name='Sider')
        self.authenticate(outsider)

        self.assertEqual(self.client.get('/api/inventory/items/').data['count'], 0)
        response = self.client.post(
            f'/api/inventory/items/{self.item.id}/adjust_stock/',
            {'operation': 'add', 'amount': 1},
            format='json'
        )
        self.assertEqual(response.status_code, 404)
