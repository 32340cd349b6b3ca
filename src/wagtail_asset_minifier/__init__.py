"""Minified, content-addressed CSS/JS artifacts with CDN rewriting for Wagtail sites."""

__version__ = "0.1.0"
