from django.apps import AppConfig


class LabcoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'labcore'
    verbose_name = 'Pathology lab'
