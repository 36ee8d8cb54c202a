"""
Public Blueprint

Pages reachable by anyone, including accounts pending approval.
"""

from flask import Blueprint

public_bp = Blueprint('public', __name__)

from gallery.public import routes  # noqa: E402, F401
