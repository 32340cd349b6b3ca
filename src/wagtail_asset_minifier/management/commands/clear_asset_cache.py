"""Management command to purge every cached artifact."""

from __future__ import annotations

from django.core.management.base import BaseCommand


class Command(BaseCommand):
    help = "Delete every minified CSS/JS artifact from the asset cache."

    def handle(self, **options: object) -> None:
        from wagtail_asset_minifier.utils import clear_cache

        cleared = clear_cache()
        self.stdout.write(self.style.SUCCESS(f"Cache cleared! {cleared} files removed."))
