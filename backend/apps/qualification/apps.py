from django.apps import AppConfig


class QualificationConfig(AppConfig):
    name = "apps.qualification"
    label = "qualification"
