from django.apps import AppConfig


class ConstructionCoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "construction_core"

    # ensure receivers are registered
    def ready(self):
        import construction_core.signals  # noqa: F401
