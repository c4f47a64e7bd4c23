"""Current-time source used by services, aggregates and tasks."""
from django.utils import timezone


def now():
    return timezone.now()


def today():
    return timezone.localdate(now())
