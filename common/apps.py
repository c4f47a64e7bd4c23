from django.apps import AppConfig
from django.contrib.admin.apps import AdminConfig


class CommonConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'common'
    verbose_name = 'Common ClinicDesk Components'


class ClinicDeskAdminConfig(AdminConfig):
    """
    Installs the ClinicDesk admin site as the default site so every
    @admin.register() decorator and admin.site.urls use it
    """
    default_site = 'common.admin_site.ClinicDeskAdminSite'
