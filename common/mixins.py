"""
Tenant scoping for serializers and viewsets.
"""
from rest_framework import serializers

from .context import TenantContext


class TenantMixin:
    """
    Serializer mixin that limits related-object choices to the caller's clinic.

    Any PrimaryKeyRelatedField whose target model carries ``clinic_id`` only
    accepts rows of the clinic found in the serializer context, so a payload
    cannot point at another clinic's patient, category or invoice.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        ctx = self.context.get('tenant_context')
        if ctx is None:
            return

        for field in self.fields.values():
            related = getattr(field, 'child_relation', field)
            if not isinstance(related, serializers.PrimaryKeyRelatedField):
                continue
            queryset = related.queryset
            if queryset is None or not hasattr(queryset.model, 'clinic_id'):
                continue
            if ctx.has_clinic:
                related.queryset = queryset.filter(clinic_id=ctx.clinic_id)
            else:
                related.queryset = queryset.none()


class TenantViewSetMixin:
    """
    ViewSet mixin that filters every queryset by the caller's clinic and
    stamps clinic_id on create.
    """

    @property
    def tenant_context(self):
        if not hasattr(self, '_tenant_context'):
            self._tenant_context = TenantContext.from_request(self.request)
        return self._tenant_context

    def get_queryset(self):
        queryset = super().get_queryset()

        # Schema generation runs without a real user
        if getattr(self, 'swagger_fake_view', False):
            return queryset.none()

        ctx = self.tenant_context
        if not ctx.has_clinic:
            return queryset.none()
        return queryset.filter(clinic_id=ctx.clinic_id)

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if not getattr(self, 'swagger_fake_view', False):
            context['tenant_context'] = self.tenant_context
        return context

    def perform_create(self, serializer):
        serializer.save(clinic_id=self.tenant_context.require_clinic())
