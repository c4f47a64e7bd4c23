from django.contrib import admin
from django.contrib.admin.sites import AdminSite
from django.utils.translation import gettext_lazy as _


class ClinicDeskAdminSite(AdminSite):
    """
    Operator admin site for ClinicDesk.

    Staff sign in with Django sessions and see every clinic; API users
    authenticate with JWTs and never reach this site.
    """
    site_title = _('ClinicDesk Administration')
    site_header = _('ClinicDesk Admin')
    index_title = _('Clinic Management')


class TenantModelAdmin(admin.ModelAdmin):
    """
    Base ModelAdmin for clinic-owned models.

    Adds clinic_id to the changelist and filters so operators can narrow
    any table to one clinic.
    """
    tenant_list_filter = ('clinic_id',)

    def get_list_display(self, request):
        list_display = list(super().get_list_display(request))
        if 'clinic_id' not in list_display:
            list_display.append('clinic_id')
        return list_display

    def get_list_filter(self, request):
        return tuple(super().get_list_filter(request)) + self.tenant_list_filter

    def get_readonly_fields(self, request, obj=None):
        readonly = list(super().get_readonly_fields(request, obj))
        # clinic ownership is fixed once a row exists
        if obj is not None and 'clinic_id' not in readonly:
            readonly.append('clinic_id')
        return readonly

    def save_formset(self, request, form, formset, change):
        """Inline children inherit the parent's clinic"""
        instances = formset.save(commit=False)
        for obj in instances:
            if hasattr(obj, 'clinic_id') and not obj.clinic_id:
                obj.clinic_id = form.instance.clinic_id
            obj.save()
        for obj in formset.deleted_objects:
            obj.delete()
        formset.save_m2m()
