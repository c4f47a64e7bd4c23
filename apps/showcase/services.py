"""
Clinic marketing content: portfolio, testimonials, services and public team cards.
"""
import logging

from common.context import TenantContext

from .models import PortfolioItem, ShowcaseService, TeamMember, Testimonial

logger = logging.getLogger(__name__)


def list_portfolio(ctx: TenantContext):
    return PortfolioItem.objects.for_clinic(ctx).order_by('display_order', 'created_at')


def create_portfolio_item(ctx: TenantContext, data) -> PortfolioItem:
    return PortfolioItem.objects.create(clinic_id=ctx.require_clinic(), **data)


def list_testimonials(ctx: TenantContext):
    return Testimonial.objects.for_clinic(ctx).order_by('-created_at')


def public_testimonials(ctx: TenantContext):
    return list_testimonials(ctx).filter(is_approved=True, is_published=True)


def moderate_testimonial(ctx: TenantContext, testimonial_id, is_approved=None, is_published=None) -> Testimonial:
    """Set either flag; flags left as None keep their value."""
    ctx.require_clinic()
    testimonial = Testimonial.objects.for_clinic(ctx).get(pk=testimonial_id)

    changed = []
    if is_approved is not None:
        testimonial.is_approved = is_approved
        changed.append('is_approved')
    if is_published is not None:
        testimonial.is_published = is_published
        changed.append('is_published')

    if changed:
        testimonial.save(update_fields=changed)
        logger.info(
            f"Testimonial moderated - Id: {testimonial.id}, Approved: {testimonial.is_approved}, "
            f"Published: {testimonial.is_published}, Clinic: {ctx.clinic_id}"
        )
    return testimonial


def list_services(ctx: TenantContext, include_inactive=False):
    services = ShowcaseService.objects.for_clinic(ctx)
    if not include_inactive:
        services = services.filter(is_active=True)
    return services.order_by('display_order', 'name')


def list_team(ctx: TenantContext):
    return TeamMember.objects.for_clinic(ctx).filter(is_active=True).order_by('display_order', 'name')


def create_team_member(ctx: TenantContext, data) -> TeamMember:
    return TeamMember.objects.create(clinic_id=ctx.require_clinic(), **data)
