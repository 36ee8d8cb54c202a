"""
Account Services

Registration, credential checks and the approval flag.
"""

import logging
from werkzeug.security import generate_password_hash, check_password_hash
from gallery.datastore import datastore, DataStoreError
from gallery.extensions import db
from gallery.models import User

logger = logging.getLogger(__name__)


class RegistrationError(ValueError):
    """Raised when an account cannot be created from the given details."""


def register_user(email, password, name=None):
    """Create a new account, pending approval."""
    email = (email or '').strip().lower()
    if not email or '@' not in email:
        raise RegistrationError('Please provide a valid email address.')
    if not password or len(password) < 6:
        raise RegistrationError('Password must be at least 6 characters long.')
    if User.query.filter_by(email=email).first():
        raise RegistrationError('Email already registered. Please login or use another email.')

    user = User(
        email=email,
        password_hash=generate_password_hash(password, method='pbkdf2:sha256'),
        name=(name or '').strip() or None,
        blocked=True,
    )
    try:
        db.session.add(user)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    logger.info('Registered account %s (pending approval)', email)
    return user


def authenticate(email, password):
    """Return the matching user or None."""
    user = User.query.filter_by(email=(email or '').strip().lower()).first()
    if user and check_password_hash(user.password_hash, password or ''):
        return user
    return None


def fetch_blocked_flag(user_id):
    """Read the account's approval flag through the data facade."""
    rows = datastore.select('users', id=user_id)
    if not rows:
        raise DataStoreError(f'No account with id {user_id}')
    return bool(rows[0]['blocked'])


def set_blocked(user_id, blocked):
    """Administrator action: approve (False) or block (True) an account."""
    updated = datastore.update('users', {'blocked': bool(blocked)}, id=user_id)
    if not updated:
        raise DataStoreError(f'No account with id {user_id}')
    logger.info('Account %s %s', user_id, 'blocked' if blocked else 'approved')
    return bool(blocked)
