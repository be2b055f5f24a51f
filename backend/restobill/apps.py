from django.apps import AppConfig


class RestobillConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "restobill"
