from django.apps import AppConfig


class MedicalOfficersConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'medical_officers'
