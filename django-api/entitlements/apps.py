from django.apps import AppConfig


class EntitlementsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "entitlements"
    verbose_name = "Package entitlements"

    def ready(self) -> None:
        from entitlements import signals  # noqa: F401
