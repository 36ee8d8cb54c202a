"""
Studio Routes
"""

from datetime import date
from flask import abort, flash, jsonify, request
from flask_login import current_user
from gallery.extensions import db
from gallery.gate.decorators import guard_route
from gallery.models import Obra
from gallery.studio import studio_bp


def _payload():
    return request.get_json(silent=True) or request.form


def _parse_date(value):
    if not value:
        return None
    return date.fromisoformat(value)


@studio_bp.route('/my-gallery')
@guard_route(require_unblocked=True)
def my_gallery():
    obras = Obra.query.filter_by(user_id=current_user.id)\
        .order_by(Obra.created_on.desc(), Obra.id.desc()).all()
    return jsonify({'obras': [obra.to_dict() for obra in obras]})


@studio_bp.route('/profile', methods=['GET', 'POST'])
@guard_route(require_unblocked=True)
def profile():
    """View or update the signed-in artist's profile"""
    if request.method == 'POST':
        data = _payload()
        for field in ('name', 'description', 'photo'):
            if field in data:
                setattr(current_user, field, (data.get(field) or '').strip() or None)
        try:
            db.session.commit()
            flash('Profile updated successfully.', 'success')
        except Exception:
            db.session.rollback()
            return jsonify({'error': 'Could not update profile.'}), 500

    return jsonify(current_user.to_dict())


@studio_bp.route('/admin/new-obra', methods=['POST'])
@guard_route(require_unblocked=True)
def new_obra():
    data = _payload()
    title = (data.get('title') or '').strip()
    if not title:
        return jsonify({'error': 'Artwork title is required.'}), 400
    try:
        created_on = _parse_date(data.get('created_on'))
    except ValueError:
        return jsonify({'error': 'Creation date must be YYYY-MM-DD.'}), 400

    obra = Obra(
        user_id=current_user.id,
        title=title,
        created_on=created_on,
        img=data.get('img') or None,
        video=data.get('video') or None,
        owner_name=current_user.name,
    )
    try:
        db.session.add(obra)
        db.session.commit()
    except Exception:
        db.session.rollback()
        return jsonify({'error': 'Could not add artwork.'}), 500

    flash(f'Artwork "{title}" added successfully.', 'success')
    return jsonify(obra.to_dict()), 201


@studio_bp.route('/admin/edit-obra/<int:obra_id>', methods=['POST'])
@guard_route(require_unblocked=True)
def edit_obra(obra_id):
    obra = db.session.get(Obra, obra_id)
    if obra is None:
        abort(404)
    if obra.user_id != current_user.id and not current_user.is_admin:
        abort(403)

    data = _payload()
    if 'title' in data:
        title = (data.get('title') or '').strip()
        if not title:
            return jsonify({'error': 'Artwork title is required.'}), 400
        obra.title = title
    if 'created_on' in data:
        try:
            obra.created_on = _parse_date(data.get('created_on'))
        except ValueError:
            return jsonify({'error': 'Creation date must be YYYY-MM-DD.'}), 400
    for field in ('img', 'video'):
        if field in data:
            setattr(obra, field, data.get(field) or None)

    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        return jsonify({'error': 'Could not update artwork.'}), 500

    flash('Artwork updated successfully.', 'success')
    return jsonify(obra.to_dict())
