from django.apps import AppConfig


class InstallerConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'installer'
    verbose_name = "Canvas API via LTI installer"
