# apps/showcase/tests.py

from apps.clinics.models import AppRole, Clinic
from common.testing import ClinicAPITestCase, create_member

from .models import PortfolioItem, ShowcaseService, TeamMember, Testimonial


class PortfolioAPITestCase(ClinicAPITestCase):

    def test_list_ordered_by_display_order(self):
        PortfolioItem.objects.create(clinic_id=self.clinic.id, title='Veneers', category='Cosmetic', display_order=2)
        PortfolioItem.objects.create(clinic_id=self.clinic.id, title='Whitening', category='Cosmetic', display_order=1)

        response = self.client.get('/api/showcase/portfolio/')

        self.assertEqual(response.status_code, 200)
        titles = [row['title'] for row in response.data['results']]
        self.assertEqual(titles, ['Whitening', 'Veneers'])

    def test_create_stamps_clinic(self):
        response = self.client.post('/api/showcase/portfolio/', {
            'title': 'Implant',
            'category': 'Surgery',
            'clinic_id': '00000000-0000-0000-0000-000000000000',
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(str(response.data['clinic_id']), str(self.clinic.id))

    def test_create_without_clinic(self):
        drifter = create_member(None, roles=())
        self.authenticate(drifter)

        response = self.client.post('/api/showcase/portfolio/', {
            'title': 'Implant', 'category': 'Surgery'
        }, format='json')

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['error'], 'No clinic associated')


class TestimonialAPITestCase(ClinicAPITestCase):

    def setUp(self):
        super().setUp()
        self.testimonial = Testimonial.objects.create(
            clinic_id=self.clinic.id, patient_name='Ana', content='Painless!', rating=5
        )

    def test_moderate_sets_only_given_flags(self):
        response = self.client.post(
            f'/api/showcase/testimonials/{self.testimonial.id}/moderate/',
            {'is_approved': True},
            format='json'
        )

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['data']['is_approved'])
        self.assertFalse(response.data['data']['is_published'])

    def test_moderate_requires_a_flag(self):
        response = self.client.post(
            f'/api/showcase/testimonials/{self.testimonial.id}/moderate/', {}, format='json'
        )
        self.assertEqual(response.status_code, 400)

    def test_public_filter(self):
        Testimonial.objects.create(
            clinic_id=self.clinic.id, patient_name='Bo', content='Great', is_approved=True, is_published=True
        )

        response = self.client.get('/api/showcase/testimonials/?public=true')

        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['patient_name'], 'Bo')

    def test_rating_out_of_range(self):
        response = self.client.post('/api/showcase/testimonials/', {
            'patient_name': 'Cy', 'content': 'Ok', 'rating': 6
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_other_clinic_cannot_moderate(self):
        other = Clinic.objects.create(name='Other', slug='other-show')
        self.authenticate(create_member(other, first_name='Out', last_name='Sider'))

        response = self.client.post(
            f'/api/showcase/testimonials/{self.testimonial.id}/moderate/',
            {'is_published': True},
            format='json'
        )

        self.assertEqual(response.status_code, 404)
        self.testimonial.refresh_from_db()
        self.assertFalse(self.testimonial.is_published)


class TeamAndServicesAPITestCase(ClinicAPITestCase):

    def test_team_lists_active_members(self):
        TeamMember.objects.create(clinic_id=self.clinic.id, name='Dr. Lee', title='Dentist', display_order=1)
        TeamMember.objects.create(clinic_id=self.clinic.id, name='Former', title='Hygienist', is_active=False)

        response = self.client.get('/api/showcase/team/')

        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['name'], 'Dr. Lee')

    def test_team_member_links_own_clinic_profile_only(self):
        provider = create_member(self.clinic, roles=(AppRole.PROVIDER,), first_name='Pat')
        other = Clinic.objects.create(name='Other', slug='other-team')
        stranger = create_member(other, first_name='Stranger')

        ok = self.client.post('/api/showcase/team/', {
            'name': 'Dr. Pat', 'title': 'Orthodontist', 'profile': str(provider.id),
            'qualifications': ['DDS', 'MS'],
        }, format='json')
        self.assertEqual(ok.status_code, 201)
        self.assertEqual(ok.data['qualifications'], ['DDS', 'MS'])

        rejected = self.client.post('/api/showcase/team/', {
            'name': 'Dr. Stranger', 'title': 'Dentist', 'profile': str(stranger.id),
        }, format='json')
        self.assertEqual(rejected.status_code, 400)

    def test_services_hide_inactive_by_default(self):
        ShowcaseService.objects.create(clinic_id=self.clinic.id, name='Cleaning', benefits=['Fresh breath'])
        ShowcaseService.objects.create(clinic_id=self.clinic.id, name='Retired', is_active=False)

        self.assertEqual(self.client.get('/api/showcase/services/').data['count'], 1)
        self.assertEqual(self.client.get('/api/showcase/services/?include_inactive=true').data['count'], 2)
