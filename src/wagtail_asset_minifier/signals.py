"""Signal handlers for wagtail-asset-minifier.

Saving or deleting ``MinifierSettings`` invalidates the cached options
snapshot so every process picks up the new configuration on its next
request.
"""

from __future__ import annotations

import logging
from typing import Any

from django.db.models.signals import post_delete, post_save

from .models import MinifierSettings
from .options import invalidate_options

logger = logging.getLogger(__name__)


def on_settings_changed(sender: type, instance: MinifierSettings, **kwargs: Any) -> None:
    """Drop the options snapshot after settings are saved or deleted."""
    logger.info("Minifier settings changed; invalidating options snapshot")
    invalidate_options()


post_save.connect(
    on_settings_changed,
    sender=MinifierSettings,
    dispatch_uid="wagtail_asset_minifier.settings_saved",
)
post_delete.connect(
    on_settings_changed,
    sender=MinifierSettings,
    dispatch_uid="wagtail_asset_minifier.settings_deleted",
)
