from django.contrib import admin
from common.admin_site import TenantModelAdmin
from .models import Appointment


@admin.register(Appointment)
class AppointmentAdmin(TenantModelAdmin):
    list_display = [
        'title', 'patient', 'provider', 'scheduled_date', 'start_time',
        'end_time', 'appointment_type', 'status'
    ]
    list_filter = ['status', 'appointment_type', 'scheduled_date']
    search_fields = ['title', 'patient__first_name', 'patient__last_name']
    date_hierarchy = 'scheduled_date'
    raw_id_fields = ['patient', 'provider']
    readonly_fields = ['id', 'created_at', 'updated_at']
