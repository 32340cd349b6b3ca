"""Initial migration for wagtail-asset-minifier."""

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies: list[tuple[str, str]] = []

    operations = [
        migrations.CreateModel(
            name="MinifierSettings",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "minify_css",
                    models.BooleanField(
                        default=True,
                        help_text="Enable CSS minification (recommended)",
                        verbose_name="Minify CSS",
                    ),
                ),
                (
                    "async_css",
                    models.BooleanField(
                        default=False,
                        help_text="Non-blocking CSS loading for better performance",
                        verbose_name="Load CSS asynchronously",
                    ),
                ),
                (
                    "minify_js",
                    models.BooleanField(
                        default=True,
                        help_text="Enable JavaScript minification (recommended)",
                        verbose_name="Minify JavaScript",
                    ),
                ),
                (
                    "exclude_css",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Comma-separated list of CSS handles to exclude",
                        verbose_name="Exclude CSS handles",
                    ),
                ),
                (
                    "exclude_js",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Comma-separated list of JS handles to exclude",
                        verbose_name="Exclude JS handles",
                    ),
                ),
                (
                    "enable_logging",
                    models.BooleanField(
                        default=False,
                        help_text="Log minification results (disable for production)",
                        verbose_name="Enable debug logging",
                    ),
                ),
                (
                    "cache_lifetime",
                    models.PositiveIntegerField(
                        default=2592000,
                        help_text="Seconds before sweep_asset_cache deletes a cached file",
                        verbose_name="Cache lifetime",
                    ),
                ),
                (
                    "enable_gzip",
                    models.BooleanField(
                        default=True,
                        help_text="Store a .gz file next to each artifact",
                        verbose_name="Write gzip copies",
                    ),
                ),
                ("enable_cdn", models.BooleanField(default=False, verbose_name="Enable CDN")),
                (
                    "cdn_url",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="e.g. https://cdn.example.com",
                        max_length=2048,
                        verbose_name="CDN URL",
                    ),
                ),
                (
                    "cdn_css",
                    models.BooleanField(default=True, verbose_name="Serve CSS from the CDN"),
                ),
                (
                    "cdn_js",
                    models.BooleanField(
                        default=True, verbose_name="Serve JavaScript from the CDN"
                    ),
                ),
                (
                    "cdn_images",
                    models.BooleanField(default=True, verbose_name="Serve images from the CDN"),
                ),
            ],
            options={
                "verbose_name": "Minify assets",
                "verbose_name_plural": "Minify assets",
            },
        ),
    ]
