"""Models for wagtail-asset-minifier."""

from __future__ import annotations

from typing import Any

from django.db import models
from wagtail.admin.panels import FieldPanel, MultiFieldPanel
from wagtail.contrib.settings.models import BaseGenericSetting, register_setting


class AssetType(models.TextChoices):
    CSS = "css", "CSS"
    JS = "js", "JavaScript"


class CdnCategory(models.TextChoices):
    CSS = "css", "CSS"
    JS = "js", "JavaScript"
    IMAGE = "image", "Images"


@register_setting(icon="cogs")
class MinifierSettings(BaseGenericSetting):
    """Persisted runtime options for the minifier.

    Edited under Settings > Minify assets. A single row (pk=1) is used.
    Values are sanitized on every save, and saving invalidates the cached
    options snapshot (see ``signals``). Exclude lists are stored as
    comma-separated handles.
    """

    minify_css = models.BooleanField(
        "Minify CSS", default=True, help_text="Enable CSS minification (recommended)"
    )
    async_css = models.BooleanField(
        "Load CSS asynchronously",
        default=False,
        help_text="Non-blocking CSS loading for better performance",
    )
    minify_js = models.BooleanField(
        "Minify JavaScript",
        default=True,
        help_text="Enable JavaScript minification (recommended)",
    )
    exclude_css = models.TextField(
        "Exclude CSS handles",
        blank=True,
        default="",
        help_text="Comma-separated list of CSS handles to exclude",
    )
    exclude_js = models.TextField(
        "Exclude JS handles",
        blank=True,
        default="",
        help_text="Comma-separated list of JS handles to exclude",
    )
    enable_logging = models.BooleanField(
        "Enable debug logging",
        default=False,
        help_text="Log minification results (disable for production)",
    )
    cache_lifetime = models.PositiveIntegerField(
        "Cache lifetime",
        default=2592000,
        help_text="Seconds before sweep_asset_cache deletes a cached file",
    )
    enable_gzip = models.BooleanField(
        "Write gzip copies", default=True, help_text="Store a .gz file next to each artifact"
    )
    enable_cdn = models.BooleanField("Enable CDN", default=False)
    cdn_url = models.CharField(
        "CDN URL",
        max_length=2048,
        blank=True,
        default="",
        help_text="e.g. https://cdn.example.com",
    )
    cdn_css = models.BooleanField("Serve CSS from the CDN", default=True)
    cdn_js = models.BooleanField("Serve JavaScript from the CDN", default=True)
    cdn_images = models.BooleanField("Serve images from the CDN", default=True)

    panels = [
        MultiFieldPanel(
            [
                FieldPanel("minify_css"),
                FieldPanel("async_css"),
                FieldPanel("minify_js"),
                FieldPanel("exclude_css"),
                FieldPanel("exclude_js"),
                FieldPanel("enable_logging"),
            ],
            heading="Performance settings",
        ),
        MultiFieldPanel(
            [FieldPanel("cache_lifetime"), FieldPanel("enable_gzip")],
            heading="Cache",
        ),
        MultiFieldPanel(
            [
                FieldPanel("enable_cdn"),
                FieldPanel("cdn_url"),
                FieldPanel("cdn_css"),
                FieldPanel("cdn_js"),
                FieldPanel("cdn_images"),
            ],
            heading="CDN",
        ),
    ]

    class Meta:
        verbose_name = "Minify assets"
        verbose_name_plural = "Minify assets"

    def __str__(self) -> str:
        return "MinifierSettings"

    def as_options(self) -> dict[str, Any]:
        from .options import OPTION_NAMES

        return {name: getattr(self, name) for name in OPTION_NAMES}

    def save(self, *args: Any, **kwargs: Any) -> None:
        from .options import sanitize_options

        self.pk = 1
        cleaned = sanitize_options(self.as_options())
        cleaned["exclude_css"] = ", ".join(cleaned["exclude_css"])
        cleaned["exclude_js"] = ", ".join(cleaned["exclude_js"])
        for name, value in cleaned.items():
            setattr(self, name, value)
        super().save(*args, **kwargs)

    @classmethod
    def stored(cls) -> MinifierSettings | None:
        """The saved row, or None when the settings were never saved."""
        return cls.base_queryset().filter(pk=1).first()
