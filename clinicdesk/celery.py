"""
Celery Configuration for ClinicDesk
"""
import os
from celery import Celery

# Set default Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'clinicdesk.settings')

# Create Celery app
app = Celery('clinicdesk')

# Load configuration from Django settings with CELERY_ prefix
# (the beat schedule lives in settings.CELERY_BEAT_SCHEDULE)
app.config_from_object('django.conf:settings', namespace='CELERY')

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()
