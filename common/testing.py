"""
Helpers for API tests: mint JWTs and authenticate as a clinic member.
"""
import uuid
from datetime import timedelta

import jwt
from django.conf import settings
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APITestCase

from apps.clinics.models import AppRole, Clinic, Profile, UserRole


def make_token(user_id, email='staff@clinic.test', expires_in=timedelta(hours=1), **claims):
    payload = {
        'user_id': str(user_id),
        'email': email,
        'exp': timezone.now() + expires_in,
        **claims,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_member(clinic, roles=(AppRole.CLINIC_ADMIN,), first_name='Test', last_name='User'):
    """Create a profile in ``clinic`` holding ``roles``; returns the profile."""
    user_id = uuid.uuid4()
    profile = Profile.objects.create(
        user_id=user_id,
        clinic_id=clinic.id if clinic else None,
        first_name=first_name,
        last_name=last_name,
        email=f"{first_name.lower()}.{user_id.hex[:6]}@clinic.test",
    )
    for role in roles:
        UserRole.objects.create(
            user_id=user_id,
            role=role,
            clinic_id=clinic.id if clinic else None,
        )
    return profile


class ClinicAPITestCase(APITestCase):
    """
    Base test case with one clinic and an authenticated clinic admin.

    Subclasses use ``self.client`` for API calls and ``self.ctx`` for
    direct service calls.
    """
    roles = (AppRole.CLINIC_ADMIN,)

    def setUp(self):
        cache.clear()
        self.clinic = Clinic.objects.create(name='Smile Dental', slug=f"smile-{uuid.uuid4().hex[:8]}")
        self.profile = create_member(self.clinic, roles=self.roles)
        self.authenticate(self.profile)

    def authenticate(self, profile):
        from common.context import TenantContext

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {make_token(profile.user_id, profile.email)}")
        roles = UserRole.objects.filter(user_id=profile.user_id, clinic_id=profile.clinic_id)
        self.ctx = TenantContext(
            clinic_id=profile.clinic_id,
            user_id=profile.user_id,
            roles=frozenset(roles.values_list('role', flat=True)),
        )
