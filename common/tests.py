# common/tests.py

import logging
import uuid
from datetime import timedelta
from decimal import Decimal
from io import StringIO

import jwt
from django.core.management import call_command
from django.test import TestCase, override_settings

from apps.billing import services as billing
from apps.clinics.models import AppRole, Clinic
from apps.patients.models import Patient
from .context import TenantContext
from .exceptions import TenantRequired
from .testing import ClinicAPITestCase, create_member, make_token


class JWTMiddlewareTestCase(TestCase):
    """Token checks on /api/ paths"""

    url = '/api/clinics/me/'

    def setUp(self):
        self.clinic = Clinic.objects.create(name='North Clinic', slug='north')
        self.profile = create_member(self.clinic, roles=(AppRole.PROVIDER,))

    def _get(self, header=None):
        extra = {'HTTP_AUTHORIZATION': header} if header is not None else {}
        return self.client.get(self.url, **extra)

    def test_missing_header(self):
        response = self._get()
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['error'], 'Authorization header required')

    def test_malformed_header(self):
        response = self._get('Bearer')
        self.assertEqual(response.status_code, 401)

    def test_wrong_scheme(self):
        response = self._get(f'Basic {make_token(self.profile.user_id)}')
        self.assertEqual(response.status_code, 401)
        self.assertIn('Bearer', response.json()['error'])

    def test_expired_token(self):
        token = make_token(self.profile.user_id, expires_in=timedelta(hours=-1))
        response = self._get(f'Bearer {token}')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['error'], 'Token has expired')

    def test_bad_signature(self):
        token = jwt.encode(
            {'user_id': str(self.profile.user_id), 'email': 'x@y.z'}, 'some-other-secret', algorithm='HS256'
        )
        response = self._get(f'Bearer {token}')
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()['success'])

    def test_missing_claim(self):
        token = jwt.encode({'user_id': str(self.profile.user_id)}, 'clinicdesk-test', algorithm='HS256')
        with override_settings(JWT_SECRET_KEY='clinicdesk-test'):
            response = self._get(f'Bearer {token}')
        self.assertEqual(response.status_code, 401)
        self.assertIn('email', response.json()['error'])

    def test_valid_token_resolves_clinic_and_roles(self):
        response = self._get(f'Bearer {make_token(self.profile.user_id, self.profile.email)}')

        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['clinic']['id'], str(self.clinic.id))
        self.assertEqual(data['roles'], ['provider'])

    def test_token_clinic_claim_is_ignored(self):
        other = Clinic.objects.create(name='South Clinic', slug='south')
        token = make_token(self.profile.user_id, clinic_id=str(other.id), roles=['clinic_admin'])

        data = self._get(f'Bearer {token}').json()['data']

        self.assertEqual(data['clinic']['id'], str(self.clinic.id))
        self.assertEqual(data['roles'], ['provider'])

    def test_docs_are_public(self):
        response = self.client.get('/api/docs/')
        self.assertEqual(response.status_code, 200)

    def test_non_api_paths_untouched(self):
        response = self.client.get('/')
        self.assertEqual(response.status_code, 302)


class TenantContextTestCase(TestCase):

    def test_require_clinic(self):
        clinic_id = uuid.uuid4()
        self.assertEqual(TenantContext(clinic_id=clinic_id).require_clinic(), clinic_id)
        with self.assertRaises(TenantRequired):
            TenantContext(clinic_id=None).require_clinic()

    def test_has_role_accepts_enum(self):
        ctx = TenantContext(clinic_id=uuid.uuid4(), roles=frozenset({'clinic_admin'}))
        self.assertTrue(ctx.has_role(AppRole.CLINIC_ADMIN))
        self.assertFalse(ctx.has_role(AppRole.PROVIDER))


class RejectionLoggingTestCase(ClinicAPITestCase):
    """Rejected operations are logged at WARNING by the error handler"""

    def test_handler_logger_emits_warnings(self):
        self.assertTrue(logging.getLogger('common.exceptions').isEnabledFor(logging.WARNING))

    def test_rejected_payment_logged(self):
        patient = Patient.objects.create(clinic_id=self.clinic.id, first_name='Ana', last_name='Diaz')
        invoice = billing.create_invoice(
            self.ctx, patient, [{'description': 'Cleaning', 'quantity': 1, 'unit_price': Decimal('80.00')}]
        )

        with self.assertLogs('common.exceptions', level='WARNING') as logs:
            response = self.client.post('/api/billing/payments/', {
                'invoice': str(invoice.id), 'amount': '200.00', 'payment_method': 'cash'
            }, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertIn('PaymentRejected', logs.output[0])


class MigrationsTestCase(TestCase):

    def test_models_have_migrations(self):
        out = StringIO()
        try:
            call_command('makemigrations', check=True, dry_run=True, stdout=out, stderr=out)
        except SystemExit:
            self.fail(f"Model changes not captured in migrations:\n{out.getvalue()}")
