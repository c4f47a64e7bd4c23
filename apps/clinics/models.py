# clinics/models.py
import uuid

from django.db import models

from common.models import ClinicQuerySet


class AppRole(models.TextChoices):
    CLINIC_ADMIN = 'clinic_admin', 'Clinic Admin'
    PROVIDER = 'provider', 'Provider'
    RECEPTION = 'reception', 'Reception'
    PATIENT = 'patient', 'Patient'


class Clinic(models.Model):
    """
    Clinic Model - the tenant.

    Its id is the clinic_id stamped on every clinic-owned row.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=100, unique=True)
    clinic_type = models.CharField(max_length=50, default='general')
    logo_url = models.URLField(max_length=500, null=True, blank=True)
    primary_color = models.CharField(max_length=20, default='#0EA5E9')
    phone = models.CharField(max_length=20, null=True, blank=True)
    email = models.EmailField(null=True, blank=True)
    address = models.TextField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    subscription_status = models.CharField(max_length=30, default='trial')
    subscription_ends_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'clinics'
        ordering = ['name']

    def __str__(self):
        return self.name


class Profile(models.Model):
    """
    Staff or patient profile for an identity-provider user.

    A profile with no clinic_id belongs to a user who has not joined a
    clinic yet; such users read empty collections and cannot write.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField(unique=True, help_text="Identity provider user id")
    clinic_id = models.UUIDField(null=True, blank=True, db_index=True)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    avatar_url = models.URLField(max_length=500, null=True, blank=True)
    phone = models.CharField(max_length=20, null=True, blank=True)
    email = models.EmailField(null=True, blank=True)
    specialization = models.CharField(max_length=200, null=True, blank=True)
    bio = models.TextField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ClinicQuerySet.as_manager()

    class Meta:
        db_table = 'profiles'
        ordering = ['first_name', 'last_name']

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()


class UserRole(models.Model):
    """Role membership of a user within one clinic."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField(db_index=True)
    role = models.CharField(max_length=20, choices=AppRole.choices)
    clinic_id = models.UUIDField(null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ClinicQuerySet.as_manager()

    class Meta:
        db_table = 'user_roles'
        ordering = ['created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['user_id', 'role', 'clinic_id'],
                name='unique_user_role_per_clinic'
            ),
        ]

    def __str__(self):
        return f"{self.user_id} - {self.get_role_display()}"
