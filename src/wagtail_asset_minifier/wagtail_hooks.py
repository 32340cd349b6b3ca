"""Wagtail hooks for the asset minifier admin integration."""

from __future__ import annotations

from django.http import HttpRequest
from django.urls import path, reverse
from wagtail import hooks
from wagtail.admin.menu import MenuItem

from .views import CLEAR_CACHE_URL_NAME, clear_cache_view


class SuperuserMenuItem(MenuItem):
    def is_shown(self, request: HttpRequest) -> bool:
        return bool(request.user.is_superuser)  # type: ignore[union-attr]


@hooks.register("register_admin_urls")
def register_admin_urls() -> list:
    """Expose the cache-clear view under the Wagtail admin."""
    return [
        path(
            "asset-minifier/clear-cache/",
            clear_cache_view,
            name=CLEAR_CACHE_URL_NAME,
        ),
    ]


@hooks.register("register_settings_menu_item")
def register_clear_cache_menu_item() -> MenuItem:
    """Link the cache-clear view from the Settings menu (superusers only)."""
    return SuperuserMenuItem(
        "Minify assets cache",
        reverse(CLEAR_CACHE_URL_NAME),
        icon_name="bin",
        order=1000,
    )
