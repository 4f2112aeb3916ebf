"""
Custom DRF router shared by every app.

DRF's DefaultRouter uses format_suffix_patterns which registers a custom
converter 'drf_format_suffix'. When multiple routers exist across apps,
this causes a ValueError: "Converter 'drf_format_suffix' is already registered."

Apps also register their main viewset under an empty prefix, where the
browsable API root would shadow the list route, so the root view is off.
"""

from rest_framework.routers import DefaultRouter


class SafeDefaultRouter(DefaultRouter):
    """DefaultRouter without format suffixes or the API root view."""
    include_format_suffixes = False
    include_root_view = False
