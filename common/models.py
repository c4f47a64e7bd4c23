import uuid

from django.db import models


class ClinicQuerySet(models.QuerySet):
    """QuerySet whose reads are always narrowed to one clinic."""

    def for_clinic(self, ctx):
        """Rows of ctx's clinic; nothing when the caller has no clinic."""
        if not ctx.has_clinic:
            return self.none()
        return self.filter(clinic_id=ctx.clinic_id)


class ClinicScopedModel(models.Model):
    """
    Abstract base for every tenant-owned table.

    ``clinic_id`` is stamped from the caller's TenantContext on insert and
    never accepted from request payloads.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    clinic_id = models.UUIDField(db_index=True, help_text="Clinic this record belongs to")
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ClinicQuerySet.as_manager()

    class Meta:
        abstract = True
