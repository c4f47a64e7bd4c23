# apps/patients/tests.py

from datetime import date, datetime, timezone as dt_timezone
from unittest.mock import patch

from django.test import TestCase

from apps.clinics.models import Clinic
from common.context import TenantContext
from common.exceptions import TenantRequired
from common.testing import ClinicAPITestCase, create_member

from . import services
from .models import Patient, PatientAllergy, PatientMedication


class PatientServiceTestCase(TestCase):

    def setUp(self):
        self.clinic = Clinic.objects.create(name='North Clinic', slug='north')
        self.ctx = TenantContext(clinic_id=self.clinic.id)

    def test_list_active_by_last_name(self):
        services.create_patient(self.ctx, {'first_name': 'Zoe', 'last_name': 'Adams'})
        services.create_patient(self.ctx, {'first_name': 'Al', 'last_name': 'Brown'})
        gone = services.create_patient(self.ctx, {'first_name': 'Cy', 'last_name': 'Aaron'})
        services.deactivate_patient(self.ctx, gone.id)

        names = [p.last_name for p in services.list_patients(self.ctx)]
        self.assertEqual(names, ['Adams', 'Brown'])
        self.assertEqual(services.list_patients(self.ctx, include_inactive=True).count(), 3)

    def test_deactivate_is_idempotent(self):
        patient = services.create_patient(self.ctx, {'first_name': 'Al', 'last_name': 'Brown'})

        services.deactivate_patient(self.ctx, patient.id)
        services.deactivate_patient(self.ctx, patient.id)

        patient.refresh_from_db()
        self.assertFalse(patient.is_active)

    def test_create_requires_clinic(self):
        with self.assertRaises(TenantRequired):
            services.create_patient(TenantContext(clinic_id=None), {'first_name': 'A', 'last_name': 'B'})
        self.assertFalse(Patient.objects.exists())

    def test_no_clinic_reads_nothing(self):
        services.create_patient(self.ctx, {'first_name': 'Al', 'last_name': 'Brown'})
        self.assertEqual(services.list_patients(TenantContext(clinic_id=None)).count(), 0)

    def test_medications_active_only(self):
        patient = services.create_patient(self.ctx, {'first_name': 'Al', 'last_name': 'Brown'})
        services.add_medication(self.ctx, patient.id, {'medication_name': 'Ibuprofen'})
        stopped = services.add_medication(self.ctx, patient.id, {'medication_name': 'Amoxicillin'})
        services.update_medication(self.ctx, stopped.id, {'is_active': False})

        names = [m.medication_name for m in services.list_medications(self.ctx, patient.id)]
        self.assertEqual(names, ['Ibuprofen'])

    @patch('common.clock.now', return_value=datetime(2024, 6, 3, 12, 0, tzinfo=dt_timezone.utc))
    def test_age(self, _now):
        patient = Patient(first_name='Al', last_name='Brown', date_of_birth=date(1990, 6, 4))
        self.assertEqual(patient.age, 33)
        patient.date_of_birth = date(1990, 6, 3)
        self.assertEqual(patient.age, 34)


class PatientAPITestCase(ClinicAPITestCase):

    def setUp(self):
        super().setUp()
        self.patient = Patient.objects.create(
            clinic_id=self.clinic.id, first_name='Ana', last_name='Diaz', phone='555-0100'
        )

    def test_create_patient(self):
        response = self.client.post('/api/patients/patients/', {
            'first_name': 'Bo',
            'last_name': 'Lee',
            'gender': 'male',
            'date_of_birth': '1985-02-01',
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['full_name'], 'Bo Lee')
        self.assertEqual(str(response.data['clinic_id']), str(self.clinic.id))

    def test_future_birth_date_rejected(self):
        response = self.client.post('/api/patients/patients/', {
            'first_name': 'Bo', 'last_name': 'Lee', 'date_of_birth': '2999-01-01'
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('date_of_birth', response.data)

    def test_search(self):
        Patient.objects.create(clinic_id=self.clinic.id, first_name='Bo', last_name='Lee')
        response = self.client.get('/api/patients/patients/?search=diaz')
        self.assertEqual(response.data['count'], 1)

    def test_destroy_soft_deletes(self):
        response = self.client.delete(f'/api/patients/patients/{self.patient.id}/')

        self.assertEqual(response.status_code, 204)
        self.assertTrue(Patient.objects.filter(pk=self.patient.id).exists())
        self.assertEqual(self.client.get('/api/patients/patients/').data['count'], 0)
        self.assertEqual(self.client.get('/api/patients/patients/?include_inactive=true').data['count'], 1)

    def test_allergies(self):
        url = f'/api/patients/patients/{self.patient.id}/allergies/'
        response = self.client.post(url, {'allergy_name': 'Penicillin', 'severity': 'severe'}, format='json')
        self.assertEqual(response.status_code, 201)

        allergy_id = response.data['id']
        self.assertEqual(len(self.client.get(url).data), 1)

        response = self.client.delete(f'/api/patients/allergies/{allergy_id}/')
        self.assertEqual(response.status_code, 204)
        self.assertFalse(PatientAllergy.objects.filter(pk=allergy_id).exists())

    def test_medication_dates_validated(self):
        response = self.client.post(
            f'/api/patients/patients/{self.patient.id}/medications/',
            {'medication_name': 'Ibuprofen', 'start_date': '2024-06-10', 'end_date': '2024-06-01'},
            format='json'
        )
        self.assertEqual(response.status_code, 400)
        self.assertFalse(PatientMedication.objects.exists())

    def test_medical_history_newest_first(self):
        url = f'/api/patients/patients/{self.patient.id}/medical-history/'
        self.client.post(url, {'condition': 'Gingivitis'}, format='json')
        self.client.post(url, {'condition': 'Cavity', 'status': 'resolved'}, format='json')

        conditions = [row['condition'] for row in self.client.get(url).data]
        self.assertEqual(conditions, ['Cavity', 'Gingivitis'])

    def test_other_clinic_isolated(self):
        other = Clinic.objects.create(name='Other', slug='other-patients')
        self.authenticate(create_member(other, first_name='Out', last_name='Sider'))

        self.assertEqual(self.client.get('/api/patients/patients/').data['count'], 0)
        self.assertEqual(self.client.get(f'/api/patients/patients/{self.patient.id}/').status_code, 404)
        response = self.client.post(
            f'/api/patients/patients/{self.patient.id}/allergies/',
            {'allergy_name': 'Latex'},
            format='json'
        )
        self.assertEqual(response.status_code, 404)
