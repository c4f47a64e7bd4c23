"""
Clinic membership and team management.
"""
import logging
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from django.db import IntegrityError, transaction

from common.context import TenantContext
from common.exceptions import RoleAlreadyAssigned, RoleAssignmentDenied

from .models import AppRole, Profile, UserRole

logger = logging.getLogger(__name__)


@dataclass
class Membership:
    clinic_id: Optional[uuid.UUID] = None
    profile_id: Optional[uuid.UUID] = None
    roles: List[str] = field(default_factory=list)


def resolve_membership(user_id) -> Membership:
    """Look up the clinic and clinic roles of an identity-provider user."""
    try:
        user_uuid = uuid.UUID(str(user_id))
    except ValueError:
        return Membership()

    profile = Profile.objects.filter(user_id=user_uuid).only('id', 'clinic_id').first()
    if profile is None or profile.clinic_id is None:
        return Membership(profile_id=profile.id if profile else None)

    roles = list(
        UserRole.objects
        .filter(user_id=user_uuid, clinic_id=profile.clinic_id)
        .values_list('role', flat=True)
    )
    return Membership(clinic_id=profile.clinic_id, profile_id=profile.id, roles=roles)


def has_clinic_role(ctx: TenantContext, role) -> bool:
    return ctx.has_role(role)


def current_profile(ctx: TenantContext):
    if ctx.user_id is None:
        return None
    return Profile.objects.filter(user_id=ctx.user_id).first()


def team_members(ctx: TenantContext):
    """Profiles of the clinic, each with the role rows held in this clinic."""
    profiles = list(Profile.objects.for_clinic(ctx).order_by('first_name', 'last_name'))
    roles_by_user = {}
    for role in UserRole.objects.for_clinic(ctx):
        roles_by_user.setdefault(role.user_id, []).append(role)

    for profile in profiles:
        profile.clinic_roles = roles_by_user.get(profile.user_id, [])
    return profiles


def _require_admin(ctx: TenantContext):
    ctx.require_clinic()
    if not ctx.has_role(AppRole.CLINIC_ADMIN):
        logger.warning(f"Role change denied - User: {ctx.user_id}, Clinic: {ctx.clinic_id}")
        raise RoleAssignmentDenied()


def assign_role(ctx: TenantContext, user_id, role) -> UserRole:
    """Grant ``role`` in the caller's clinic. Only clinic admins may do this."""
    _require_admin(ctx)
    role = AppRole(role)

    try:
        with transaction.atomic():
            user_role = UserRole.objects.create(
                user_id=user_id,
                role=role,
                clinic_id=ctx.clinic_id,
            )
    except IntegrityError:
        raise RoleAlreadyAssigned()

    logger.info(f"Role assigned - User: {user_id}, Role: {role}, Clinic: {ctx.clinic_id}, By: {ctx.user_id}")
    return user_role


def remove_role(ctx: TenantContext, role_id) -> None:
    """Revoke a role row of the caller's clinic. Only clinic admins may do this."""
    _require_admin(ctx)
    user_role = UserRole.objects.for_clinic(ctx).get(pk=role_id)
    user_role.delete()
    logger.info(
        f"Role removed - User: {user_role.user_id}, Role: {user_role.role}, "
        f"Clinic: {ctx.clinic_id}, By: {ctx.user_id}"
    )
