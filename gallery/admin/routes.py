"""
Admin Routes
"""

import logging
from flask import abort, flash, jsonify
from gallery.admin import admin_bp
from gallery.datastore import DataStoreError
from gallery.gate.decorators import admin_required, guard_route
from gallery.models import User
from gallery.services.accounts import set_blocked
from gallery.services.analytics import get_analytics_stats

logger = logging.getLogger(__name__)


@admin_bp.route('/users')
@admin_required
def list_users():
    """All accounts, pending approvals first."""
    users = User.query.order_by(User.blocked.desc(), User.created_at.desc()).all()
    return jsonify({'users': [user.to_dict() for user in users]})


def _set_account_state(user_id, blocked):
    try:
        set_blocked(user_id, blocked)
    except DataStoreError as e:
        logger.warning('Could not change approval state of %s: %s', user_id, e)
        abort(404)
    flash('Account blocked.' if blocked else 'Account approved.', 'success')
    return jsonify({'id': user_id, 'blocked': blocked})


@admin_bp.route('/users/<int:user_id>/approve', methods=['POST'])
@admin_required
def approve_user(user_id):
    return _set_account_state(user_id, False)


@admin_bp.route('/users/<int:user_id>/block', methods=['POST'])
@admin_required
def block_user(user_id):
    return _set_account_state(user_id, True)


@admin_bp.route('/analytics')
@guard_route(require_unblocked=True)
@admin_required
def analytics():
    """Visit and artwork-view statistics"""
    return jsonify(get_analytics_stats())
