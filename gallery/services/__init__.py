"""
Services Package

Exports all services for easy importing.
"""

from gallery.services.geolocation import Geolocator, GeoCache, get_geolocation, unknown_location
from gallery.services.accounts import register_user, authenticate, fetch_blocked_flag, set_blocked, RegistrationError
from gallery.services.analytics import get_analytics_stats, format_duration

__all__ = [
    'Geolocator',
    'GeoCache',
    'get_geolocation',
    'unknown_location',
    'register_user',
    'authenticate',
    'fetch_blocked_flag',
    'set_blocked',
    'RegistrationError',
    'get_analytics_stats',
    'format_duration',
]
