"""
Tracking Blueprint

Beacon endpoints for anonymous visit and artwork-view dwell tracking.
"""

from flask import Blueprint

tracking_bp = Blueprint('tracking', __name__)

from gallery.tracking import routes  # noqa: E402, F401
