# apps/appointments/tests.py

from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from unittest.mock import patch

from django.test import SimpleTestCase, TestCase, override_settings

from apps.clinics.models import Clinic
from apps.patients.models import Patient
from common.context import TenantContext
from common.exceptions import InvalidTransition
from common.testing import ClinicAPITestCase, create_member

from . import services
from .models import Appointment, AppointmentStatus
from .scheduler import WeekGrid, cell_for, is_allowed_transition, time_slots, week_of

MONDAY = date(2024, 6, 3)


def _unsaved(day, start, end=None, title='Visit'):
    end = end or (datetime.combine(day, start) + timedelta(minutes=30)).time()
    return Appointment(title=title, scheduled_date=day, start_time=start, end_time=end)


class SchedulerTestCase(SimpleTestCase):
    """Calendar layout is pure and needs no database"""

    def test_default_slots(self):
        slots = time_slots()
        self.assertEqual(len(slots), 20)
        self.assertEqual(slots[0], '08:00')
        self.assertEqual(slots[-1], '17:30')

    def test_week_starts_on_sunday(self):
        dates = week_of(MONDAY)
        self.assertEqual(dates[0], date(2024, 6, 2))
        self.assertEqual(dates[-1], date(2024, 6, 8))
        self.assertEqual(week_of(date(2024, 6, 2)), dates)
        self.assertEqual(week_of(date(2024, 6, 8)), dates)

    def test_monday_nine_oclock_lands_in_one_cell(self):
        appointment = _unsaved(MONDAY, time(9, 0), time(9, 30))

        grid = WeekGrid.build([appointment], MONDAY)

        self.assertEqual(grid.cell(MONDAY, '09:00'), [appointment])
        placements = list(grid.placements())
        self.assertEqual(placements, [(MONDAY, '09:00', appointment)])

    def test_shared_cell_and_unslotted(self):
        first = _unsaved(MONDAY, time(10, 0), title='A')
        second = _unsaved(MONDAY, time(10, 0), title='B')
        odd = _unsaved(MONDAY, time(10, 15), time(10, 45), title='Odd')
        early = _unsaved(MONDAY, time(7, 0), title='Early')
        next_week = _unsaved(date(2024, 6, 10), time(10, 0))

        grid = WeekGrid.build([first, second, odd, early, next_week], MONDAY)

        self.assertEqual(len(grid.cell(MONDAY, '10:00')), 2)
        self.assertEqual(grid.unslotted[MONDAY], [early, odd])
        self.assertEqual(len(list(grid.placements())), 2)

    def test_cell_for_truncates_seconds(self):
        appointment = _unsaved(MONDAY, time(9, 0, 45), time(9, 30))
        self.assertEqual(cell_for([appointment], MONDAY, '09:00'), [appointment])
        self.assertEqual(cell_for([appointment], date(2024, 6, 4), '09:00'), [])

    def test_serialize_shape(self):
        grid = WeekGrid.day([_unsaved(MONDAY, time(8, 30))], MONDAY)
        data = grid.serialize(lambda a: a.title)

        self.assertEqual(data['dates'], ['2024-06-03'])
        row = next(r for r in data['rows'] if r['time'] == '08:30')
        self.assertEqual(row['cells'][0]['appointments'], ['Visit'])
        self.assertEqual(data['unslotted'], {})

    def test_transition_graph(self):
        self.assertTrue(is_allowed_transition('scheduled', 'confirmed'))
        self.assertTrue(is_allowed_transition('confirmed', 'in_progress'))
        self.assertTrue(is_allowed_transition('in_progress', 'completed'))
        self.assertTrue(is_allowed_transition('in_progress', 'no_show'))
        self.assertTrue(is_allowed_transition('completed', 'completed'))
        self.assertFalse(is_allowed_transition('scheduled', 'completed'))
        self.assertFalse(is_allowed_transition('cancelled', 'scheduled'))


class AppointmentServiceTestCase(TestCase):

    def setUp(self):
        self.clinic = Clinic.objects.create(name='North Clinic', slug='north')
        self.ctx = TenantContext(clinic_id=self.clinic.id)
        self.patient = Patient.objects.create(clinic_id=self.clinic.id, first_name='Ana', last_name='Diaz')

    def _create(self, day=MONDAY, start=time(9, 0), end=time(9, 30), **extra):
        return services.create_appointment(self.ctx, {
            'patient': self.patient,
            'title': 'Check-up',
            'scheduled_date': day,
            'start_time': start,
            'end_time': end,
            **extra,
        })

    def test_permissive_transitions_by_default(self):
        appointment = self._create()
        updated = services.set_status(self.ctx, appointment.id, AppointmentStatus.COMPLETED)
        self.assertEqual(updated.status, AppointmentStatus.COMPLETED)
        updated = services.set_status(self.ctx, appointment.id, AppointmentStatus.SCHEDULED)
        self.assertEqual(updated.status, AppointmentStatus.SCHEDULED)

    @override_settings(APPOINTMENT_STRICT_TRANSITIONS=True)
    def test_strict_transitions(self):
        appointment = self._create()

        with self.assertRaises(InvalidTransition):
            services.set_status(self.ctx, appointment.id, AppointmentStatus.COMPLETED)
        appointment.refresh_from_db()
        self.assertEqual(appointment.status, AppointmentStatus.SCHEDULED)

        services.set_status(self.ctx, appointment.id, AppointmentStatus.CONFIRMED)
        services.set_status(self.ctx, appointment.id, AppointmentStatus.CONFIRMED)
        services.set_status(self.ctx, appointment.id, AppointmentStatus.IN_PROGRESS)
        self.assertEqual(
            services.set_status(self.ctx, appointment.id, AppointmentStatus.COMPLETED).status,
            AppointmentStatus.COMPLETED
        )

    def test_strict_flag_per_call(self):
        appointment = self._create(status=AppointmentStatus.CANCELLED)
        with self.assertRaises(InvalidTransition):
            services.set_status(self.ctx, appointment.id, AppointmentStatus.CONFIRMED, strict=True)

    @override_settings(APPOINTMENT_STRICT_TRANSITIONS=True)
    def test_update_checks_status(self):
        appointment = self._create()
        with self.assertRaises(InvalidTransition):
            services.update_appointment(self.ctx, appointment.id, {'status': 'completed', 'title': 'New'})
        appointment.refresh_from_db()
        self.assertEqual(appointment.title, 'Check-up')

    def test_overlaps_are_advisory(self):
        first = self._create(start=time(9, 0), end=time(10, 0))
        second = self._create(start=time(9, 30), end=time(10, 30))
        self._create(start=time(10, 0), end=time(10, 30))
        self._create(start=time(9, 15), end=time(9, 45), status=AppointmentStatus.CANCELLED)

        overlaps = list(services.overlapping_appointments(self.ctx, first))
        self.assertEqual(overlaps, [second])

    @patch('common.clock.now', return_value=datetime(2024, 6, 3, 8, 0, tzinfo=dt_timezone.utc))
    def test_today_and_upcoming(self, _now):
        self._create()
        self._create(day=date(2024, 6, 4))
        self._create(day=date(2024, 6, 5), status=AppointmentStatus.CANCELLED)
        self._create(day=date(2024, 6, 1))

        self.assertEqual(services.today_appointments(self.ctx).count(), 1)
        upcoming = list(services.upcoming_appointments(self.ctx))
        self.assertEqual([a.scheduled_date for a in upcoming], [MONDAY, date(2024, 6, 4)])
        self.assertEqual(len(services.upcoming_appointments(self.ctx, limit=1)), 1)

    def test_delete_is_hard(self):
        appointment = self._create()
        services.delete_appointment(self.ctx, appointment.id)
        self.assertFalse(Appointment.objects.filter(pk=appointment.id).exists())


class AppointmentAPITestCase(ClinicAPITestCase):

    def setUp(self):
        super().setUp()
        self.patient = Patient.objects.create(clinic_id=self.clinic.id, first_name='Ana', last_name='Diaz')

    def _payload(self, **overrides):
        payload = {
            'patient': str(self.patient.id),
            'title': 'Cleaning',
            'scheduled_date': '2024-06-03',
            'start_time': '09:00',
            'end_time': '09:30',
        }
        payload.update(overrides)
        return payload

    def test_create_and_week_grid(self):
        response = self.client.post('/api/appointments/appointments/', self._payload(), format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['overlapping_appointments'], [])

        week = self.client.get('/api/appointments/appointments/week/?date=2024-06-05').data['data']
        self.assertEqual(week['dates'][0], '2024-06-02')
        row = next(r for r in week['rows'] if r['time'] == '09:00')
        filled = [cell['date'] for cell in row['cells'] if cell['appointments']]
        self.assertEqual(filled, ['2024-06-03'])

    def test_create_reports_overlaps(self):
        self.client.post('/api/appointments/appointments/', self._payload(), format='json')
        response = self.client.post(
            '/api/appointments/appointments/',
            self._payload(start_time='09:15', end_time='09:45'),
            format='json'
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(len(response.data['overlapping_appointments']), 1)

    def test_end_before_start_rejected(self):
        response = self.client.post(
            '/api/appointments/appointments/', self._payload(start_time='10:00', end_time='09:00'), format='json'
        )
        self.assertEqual(response.status_code, 400)

    def test_inactive_or_foreign_patient_rejected(self):
        other = Clinic.objects.create(name='Other', slug='other-appt')
        foreign = Patient.objects.create(clinic_id=other.id, first_name='Bo', last_name='Lee')
        response = self.client.post(
            '/api/appointments/appointments/', self._payload(patient=str(foreign.id)), format='json'
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('patient', response.data)

    def test_day_grid(self):
        self.client.post('/api/appointments/appointments/', self._payload(start_time='07:00', end_time='07:30'),
                         format='json')
        data = self.client.get('/api/appointments/appointments/day/?date=2024-06-03').data['data']
        self.assertEqual(data['dates'], ['2024-06-03'])
        self.assertEqual(len(data['unslotted']['2024-06-03']), 1)

    def test_bad_calendar_date(self):
        response = self.client.get('/api/appointments/appointments/week/?date=June')
        self.assertEqual(response.status_code, 400)

    @override_settings(APPOINTMENT_STRICT_TRANSITIONS=True)
    def test_status_endpoint_strict(self):
        created = self.client.post('/api/appointments/appointments/', self._payload(), format='json')
        url = f"/api/appointments/appointments/{created.data['id']}/status/"

        rejected = self.client.post(url, {'status': 'completed'}, format='json')
        self.assertEqual(rejected.status_code, 400)
        self.assertFalse(rejected.data['success'])

        accepted = self.client.post(url, {'status': 'confirmed'}, format='json')
        self.assertEqual(accepted.status_code, 200)
        self.assertEqual(accepted.data['data']['status'], 'confirmed')

    def test_other_clinic_isolated(self):
        created = self.client.post('/api/appointments/appointments/', self._payload(), format='json')

        other = Clinic.objects.create(name='Other', slug='other-appt')
        self.authenticate(create_member(other, first_name='Out', last_name='Sider'))

        self.assertEqual(self.client.get('/api/appointments/appointments/').data['count'], 0)
        response = self.client.post(
            f"/api/appointments/appointments/{created.data['id']}/status/", {'status': 'cancelled'}, format='json'
        )
        self.assertEqual(response.status_code, 404)
