# showcase/models.py
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from common.models import ClinicScopedModel


class PortfolioItem(ClinicScopedModel):
    """Before/after treatment case shown on the clinic's public pages."""

    title = models.CharField(max_length=200)
    category = models.CharField(max_length=100)
    description = models.TextField(null=True, blank=True)
    before_image_url = models.URLField(max_length=500, null=True, blank=True)
    after_image_url = models.URLField(max_length=500, null=True, blank=True)
    is_published = models.BooleanField(default=False)
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'showcase_portfolio'
        ordering = ['display_order', 'created_at']

    def __str__(self):
        return self.title


class Testimonial(ClinicScopedModel):
    """
    Patient testimonial.

    Only testimonials that are both approved and published are public.
    """

    patient_name = models.CharField(max_length=200)
    patient_photo_url = models.URLField(max_length=500, null=True, blank=True)
    content = models.TextField()
    rating = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    treatment_type = models.CharField(max_length=100, null=True, blank=True)
    is_approved = models.BooleanField(default=False)
    is_published = models.BooleanField(default=False)

    class Meta:
        db_table = 'showcase_testimonials'
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(rating__isnull=True) | models.Q(rating__gte=1, rating__lte=5),
                name='testimonial_rating_range'
            ),
        ]

    def __str__(self):
        return f"{self.patient_name} ({self.rating or '-'}/5)"


class ShowcaseService(ClinicScopedModel):
    name = models.CharField(max_length=200)
    description = models.TextField(null=True, blank=True)
    benefits = models.JSONField(default=list, blank=True)
    price_range = models.CharField(max_length=100, null=True, blank=True)
    duration = models.CharField(max_length=100, null=True, blank=True)
    image_url = models.URLField(max_length=500, null=True, blank=True)
    is_active = models.BooleanField(default=True)
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'showcase_services'
        ordering = ['display_order', 'name']

    def __str__(self):
        return self.name


class TeamMember(ClinicScopedModel):
    """Public staff card; may be linked to a staff profile."""

    profile = models.ForeignKey(
        'clinics.Profile',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='team_cards'
    )
    name = models.CharField(max_length=200)
    title = models.CharField(max_length=200)
    specialization = models.CharField(max_length=200, null=True, blank=True)
    qualifications = models.JSONField(default=list, blank=True)
    bio = models.TextField(null=True, blank=True)
    photo_url = models.URLField(max_length=500, null=True, blank=True)
    display_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'team_members'
        ordering = ['display_order', 'name']

    def __str__(self):
        return f"{self.name} - {self.title}"
