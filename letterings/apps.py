from django.apps import AppConfig


class LetteringsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "letterings"
