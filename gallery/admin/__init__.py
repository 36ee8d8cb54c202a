"""
Admin Blueprint

Account approval and analytics for administrators.
"""

from flask import Blueprint

admin_bp = Blueprint('admin', __name__)

from gallery.admin import routes  # noqa: E402, F401
