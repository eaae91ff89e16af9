from django.apps import AppConfig


class DailyreportsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "dailyreports"
    verbose_name = "Daily Reports"
