"""
Signal handlers for the dashboard app.

Any write to a model the rollups read bumps the owning clinic's cache
version once the surrounding transaction commits. Bulk ``.update()`` calls
skip these signals and invalidate explicitly.
"""
from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .cache import invalidate_clinic


@receiver(post_save, sender='appointments.Appointment')
@receiver(post_delete, sender='appointments.Appointment')
@receiver(post_save, sender='patients.Patient')
@receiver(post_delete, sender='patients.Patient')
@receiver(post_save, sender='billing.Invoice')
@receiver(post_delete, sender='billing.Invoice')
@receiver(post_save, sender='billing.Payment')
@receiver(post_delete, sender='billing.Payment')
@receiver(post_save, sender='inventory.InventoryItem')
@receiver(post_delete, sender='inventory.InventoryItem')
def invalidate_dashboard_cache(sender, instance, **kwargs):
    clinic_id = instance.clinic_id
    # Bumping before commit lets a concurrent read cache the old figures
    transaction.on_commit(lambda: invalidate_clinic(clinic_id))
