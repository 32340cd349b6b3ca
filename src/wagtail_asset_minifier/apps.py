"""Django app configuration for wagtail-asset-minifier."""

from django.apps import AppConfig


class WagtailAssetMinifierConfig(AppConfig):
    name = "wagtail_asset_minifier"
    default_auto_field = "django.db.models.BigAutoField"
    verbose_name = "Wagtail Asset Minifier"

    def ready(self) -> None:
        from . import signals  # noqa: F401
