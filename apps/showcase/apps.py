# showcase/apps.py
from django.apps import AppConfig


class ShowcaseConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.showcase'
    verbose_name = 'Showcase'
