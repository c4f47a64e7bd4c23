# apps/clinics/tests.py

import uuid

from django.test import TestCase

from common.context import TenantContext
from common.exceptions import RoleAlreadyAssigned, RoleAssignmentDenied, TenantRequired
from common.testing import ClinicAPITestCase, create_member

from . import services
from .models import AppRole, Clinic, UserRole


class MembershipTestCase(TestCase):
    """Clinic and roles are looked up from profiles, not from tokens"""

    def setUp(self):
        self.clinic = Clinic.objects.create(name='North Clinic', slug='north')

    def test_resolve_member(self):
        profile = create_member(self.clinic, roles=(AppRole.PROVIDER, AppRole.RECEPTION))

        membership = services.resolve_membership(profile.user_id)

        self.assertEqual(membership.clinic_id, self.clinic.id)
        self.assertEqual(membership.profile_id, profile.id)
        self.assertEqual(sorted(membership.roles), ['provider', 'reception'])

    def test_roles_from_other_clinics_ignored(self):
        profile = create_member(self.clinic, roles=(AppRole.PROVIDER,))
        other = Clinic.objects.create(name='South Clinic', slug='south')
        UserRole.objects.create(user_id=profile.user_id, role=AppRole.CLINIC_ADMIN, clinic_id=other.id)

        membership = services.resolve_membership(profile.user_id)

        self.assertEqual(membership.roles, ['provider'])

    def test_unknown_and_malformed_users(self):
        self.assertIsNone(services.resolve_membership(uuid.uuid4()).clinic_id)
        self.assertIsNone(services.resolve_membership('not-a-uuid').clinic_id)

    def test_profile_without_clinic(self):
        profile = create_member(None, roles=())
        membership = services.resolve_membership(profile.user_id)
        self.assertIsNone(membership.clinic_id)
        self.assertEqual(membership.profile_id, profile.id)


class RoleAssignmentServiceTestCase(TestCase):

    def setUp(self):
        self.clinic = Clinic.objects.create(name='North Clinic', slug='north')
        self.admin_ctx = TenantContext(
            clinic_id=self.clinic.id, user_id=uuid.uuid4(), roles=frozenset({AppRole.CLINIC_ADMIN.value})
        )
        self.member = create_member(self.clinic, roles=())

    def test_admin_assigns_role(self):
        user_role = services.assign_role(self.admin_ctx, self.member.user_id, AppRole.PROVIDER)

        self.assertEqual(user_role.clinic_id, self.clinic.id)
        self.assertTrue(services.has_clinic_role(
            TenantContext(clinic_id=self.clinic.id, roles=frozenset({'provider'})), AppRole.PROVIDER
        ))

    def test_duplicate_rejected(self):
        services.assign_role(self.admin_ctx, self.member.user_id, AppRole.PROVIDER)
        with self.assertRaises(RoleAlreadyAssigned):
            services.assign_role(self.admin_ctx, self.member.user_id, AppRole.PROVIDER)
        self.assertEqual(UserRole.objects.filter(user_id=self.member.user_id).count(), 1)

    def test_non_admin_denied(self):
        ctx = TenantContext(clinic_id=self.clinic.id, roles=frozenset({'reception'}))
        with self.assertRaises(RoleAssignmentDenied):
            services.assign_role(ctx, self.member.user_id, AppRole.PROVIDER)

    def test_no_clinic(self):
        ctx = TenantContext(clinic_id=None, roles=frozenset({'clinic_admin'}))
        with self.assertRaises(TenantRequired):
            services.assign_role(ctx, self.member.user_id, AppRole.PROVIDER)

    def test_remove_role_scoped_to_clinic(self):
        other = Clinic.objects.create(name='South Clinic', slug='south')
        foreign = UserRole.objects.create(user_id=uuid.uuid4(), role=AppRole.PROVIDER, clinic_id=other.id)

        with self.assertRaises(UserRole.DoesNotExist):
            services.remove_role(self.admin_ctx, foreign.id)
        self.assertTrue(UserRole.objects.filter(pk=foreign.id).exists())


class ClinicAPITests(ClinicAPITestCase):

    def test_me(self):
        response = self.client.get('/api/clinics/me/')

        self.assertEqual(response.status_code, 200)
        data = response.data['data']
        self.assertEqual(data['clinic']['name'], 'Smile Dental')
        self.assertEqual(data['roles'], ['clinic_admin'])
        self.assertEqual(data['profile']['id'], str(self.profile.id))

    def test_team_lists_clinic_members_with_roles(self):
        create_member(self.clinic, roles=(AppRole.PROVIDER,), first_name='Dana')
        other = Clinic.objects.create(name='Other', slug='other-team-api')
        create_member(other, first_name='Eve')

        response = self.client.get('/api/clinics/team/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['count'], 2)
        names = {row['first_name']: row['roles'] for row in response.data['data']}
        self.assertEqual([r['role'] for r in names['Dana']], ['provider'])

    def test_assign_and_remove_role(self):
        member = create_member(self.clinic, roles=(), first_name='Dana')

        response = self.client.post(
            '/api/clinics/team/roles/',
            {'user_id': str(member.user_id), 'role': 'provider'},
            format='json'
        )
        self.assertEqual(response.status_code, 201)
        role_id = response.data['data']['id']

        duplicate = self.client.post(
            '/api/clinics/team/roles/',
            {'user_id': str(member.user_id), 'role': 'provider'},
            format='json'
        )
        self.assertEqual(duplicate.status_code, 400)
        self.assertFalse(duplicate.data['success'])

        response = self.client.delete(f'/api/clinics/team/roles/{role_id}/')
        self.assertEqual(response.status_code, 204)
        self.assertFalse(UserRole.objects.filter(pk=role_id).exists())


class ReceptionRoleAPITests(ClinicAPITestCase):
    roles = (AppRole.RECEPTION,)

    def test_cannot_assign_roles(self):
        member = create_member(self.clinic, roles=(), first_name='Dana')

        response = self.client.post(
            '/api/clinics/team/roles/',
            {'user_id': str(member.user_id), 'role': 'clinic_admin'},
            format='json'
        )

        self.assertEqual(response.status_code, 403)
        self.assertFalse(UserRole.objects.filter(user_id=member.user_id).exists())

    def test_cannot_remove_roles(self):
        role = UserRole.objects.get(user_id=self.profile.user_id)
        response = self.client.delete(f'/api/clinics/team/roles/{role.id}/')
        self.assertEqual(response.status_code, 403)

    def test_can_read_team(self):
        self.assertEqual(self.client.get('/api/clinics/team/').status_code, 200)
