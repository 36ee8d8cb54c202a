"""
Public Routes
"""

import logging
from flask import abort, get_flashed_messages, jsonify
from flask_login import current_user
from gallery.datastore import DataStoreError
from gallery.extensions import db
from gallery.gate.hooks import cached_blocked_flag, forget_approval_state
from gallery.models import Obra, ObraView, User
from gallery.public import public_bp

logger = logging.getLogger(__name__)


@public_bp.route('/')
def index():
    """Public gallery, newest artworks first"""
    obras = Obra.query.order_by(Obra.created_on.desc(), Obra.id.desc()).all()
    return jsonify({
        'obras': [obra.to_dict() for obra in obras],
        'messages': get_flashed_messages(with_categories=True),
    })


@public_bp.route('/welcome')
def welcome():
    """Holding page for accounts pending approval.

    The cached approval flag is refreshed here so an account approved
    meanwhile is released on its next visit.
    """
    blocked = None
    if current_user.is_authenticated:
        forget_approval_state()
        try:
            blocked = cached_blocked_flag()
        except DataStoreError as e:
            logger.warning('Could not refresh approval state: %s', e)

    return jsonify({
        'authenticated': current_user.is_authenticated,
        'blocked': blocked,
        'messages': get_flashed_messages(with_categories=True),
    })


@public_bp.route('/obras/<int:obra_id>')
def obra_detail(obra_id):
    obra = db.session.get(Obra, obra_id)
    if obra is None:
        abort(404)
    data = obra.to_dict()
    data['view_count'] = ObraView.query.filter_by(obra_id=obra_id).count()
    return jsonify(data)


@public_bp.route('/artist/<int:user_id>')
def artist_public(user_id):
    """Public artist profile with their artworks"""
    artist = db.session.get(User, user_id)
    if artist is None:
        abort(404)
    return jsonify({
        'artist': {
            'id': artist.id,
            'name': artist.name,
            'description': artist.description,
            'photo': artist.photo,
        },
        'obras': [obra.to_dict() for obra in artist.obras],
    })
