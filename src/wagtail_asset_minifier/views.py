"""Wagtail admin view for clearing the artifact cache."""

from __future__ import annotations

from django.contrib import messages
from django.core.exceptions import PermissionDenied
from django.http import HttpRequest, HttpResponse
from django.shortcuts import redirect
from django.template.response import TemplateResponse

from .utils import clear_cache

CLEAR_CACHE_URL_NAME = "wagtail_asset_minifier_clear_cache"


def clear_cache_view(request: HttpRequest) -> HttpResponse:
    """Confirm (GET) and perform (POST) a full purge of cached artifacts."""
    if not request.user.is_superuser:  # type: ignore[union-attr]
        raise PermissionDenied

    if request.method == "POST":
        cleared = clear_cache()
        messages.success(request, f"Cache cleared! {cleared} files removed.")
        return redirect(CLEAR_CACHE_URL_NAME)

    return TemplateResponse(
        request,
        "wagtail_asset_minifier/clear_cache.html",
        {"page_title": "Minify assets cache"},
    )
