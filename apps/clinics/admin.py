from django.contrib import admin

from common.admin_site import TenantModelAdmin
from .models import Clinic, Profile, UserRole


@admin.register(Clinic)
class ClinicAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'clinic_type', 'subscription_status', 'is_active', 'created_at']
    list_filter = ['clinic_type', 'subscription_status', 'is_active']
    search_fields = ['name', 'slug', 'email']
    prepopulated_fields = {'slug': ('name',)}
    readonly_fields = ['id', 'created_at', 'updated_at']


@admin.register(Profile)
class ProfileAdmin(TenantModelAdmin):
    list_display = ['full_name', 'email', 'specialization', 'is_active']
    list_filter = ['is_active']
    search_fields = ['first_name', 'last_name', 'email', 'user_id']
    readonly_fields = ['id', 'created_at', 'updated_at']


@admin.register(UserRole)
class UserRoleAdmin(TenantModelAdmin):
    list_display = ['user_id', 'role', 'created_at']
    list_filter = ['role']
    search_fields = ['user_id']
