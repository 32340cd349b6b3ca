"""Management command to evict old cached artifacts.

Meant to run weekly from cron or any other scheduler.
"""

from __future__ import annotations

from django.core.management.base import BaseCommand, CommandParser


class Command(BaseCommand):
    help = "Delete cached CSS/JS artifacts older than the configured cache lifetime."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--max-age",
            type=int,
            dest="max_age",
            help="Maximum age in seconds. Defaults to the cache_lifetime option.",
        )

    def handle(self, **options: object) -> None:
        from wagtail_asset_minifier.options import get_options
        from wagtail_asset_minifier.utils import sweep_cache

        max_age = options.get("max_age")
        if max_age is None:
            max_age = get_options().cache_lifetime

        deleted = sweep_cache(max_age)  # type: ignore[arg-type]
        self.stdout.write(
            self.style.SUCCESS(f"Done. Deleted {deleted} file(s) older than {max_age}s.")
        )
