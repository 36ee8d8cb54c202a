"""
Studio Blueprint

The artist's own gallery, profile and artwork editing. Every screen here
requires an approved account.
"""

from flask import Blueprint

studio_bp = Blueprint('studio', __name__)

from gallery.studio import routes  # noqa: E402, F401
