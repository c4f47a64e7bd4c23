from django.contrib import admin

from common.admin_site import TenantModelAdmin
from .models import PortfolioItem, ShowcaseService, TeamMember, Testimonial


@admin.register(PortfolioItem)
class PortfolioItemAdmin(TenantModelAdmin):
    list_display = ['title', 'category', 'is_published', 'display_order']
    list_filter = ['category', 'is_published']
    list_editable = ['is_published', 'display_order']
    search_fields = ['title']


@admin.register(Testimonial)
class TestimonialAdmin(TenantModelAdmin):
    list_display = ['patient_name', 'rating', 'treatment_type', 'is_approved', 'is_published', 'created_at']
    list_filter = ['is_approved', 'is_published', 'rating']
    search_fields = ['patient_name', 'content']
    actions = ['approve_and_publish']

    @admin.action(description='Approve and publish selected testimonials')
    def approve_and_publish(self, request, queryset):
        updated = queryset.update(is_approved=True, is_published=True)
        self.message_user(request, f'{updated} testimonial(s) published.')


@admin.register(ShowcaseService)
class ShowcaseServiceAdmin(TenantModelAdmin):
    list_display = ['name', 'price_range', 'duration', 'is_active', 'display_order']
    list_filter = ['is_active']
    search_fields = ['name']


@admin.register(TeamMember)
class TeamMemberAdmin(TenantModelAdmin):
    list_display = ['name', 'title', 'specialization', 'is_active', 'display_order']
    list_filter = ['is_active']
    search_fields = ['name', 'specialization']
    raw_id_fields = ['profile']
