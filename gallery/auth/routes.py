"""
Auth Routes

Account authentication using Flask-Login.
"""

import logging
from flask import flash, get_flashed_messages, jsonify, redirect, request, url_for
from flask_login import current_user, login_required, login_user, logout_user
from gallery.auth import auth_bp
from gallery.gate.hooks import forget_approval_state
from gallery.services.accounts import RegistrationError, authenticate, register_user

logger = logging.getLogger(__name__)


def _form_value(name, default=''):
    payload = request.get_json(silent=True) or {}
    return payload.get(name, request.form.get(name, default))


def _form_flag(name):
    return str(_form_value(name, '')).lower() in ('1', 'true', 'on', 'yes')


@auth_bp.route('/auth', methods=['GET', 'POST'])
def login():
    """Sign-in page"""
    if request.method == 'GET':
        return jsonify({
            'authenticated': current_user.is_authenticated,
            'messages': get_flashed_messages(with_categories=True),
        })

    email = _form_value('email', '').strip()
    password = _form_value('password', '')
    if not email or not password:
        return jsonify({'error': 'Please provide both email and password.'}), 400

    user = authenticate(email, password)
    if user is None:
        return jsonify({'error': 'Invalid email or password. Please try again.'}), 401

    login_user(user, remember=_form_flag('remember'))
    forget_approval_state()
    flash(f'Welcome back, {user.name or user.email}!', 'success')

    next_page = request.args.get('next')
    if next_page and next_page.startswith('/') and not next_page.startswith('//'):
        return redirect(next_page)
    return redirect(url_for('public.index'))


@auth_bp.route('/auth/register', methods=['POST'])
def register():
    """Account registration; new accounts wait for approval."""
    try:
        user = register_user(_form_value('email'), _form_value('password'), _form_value('name'))
    except RegistrationError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error('Registration error: %s', e)
        return jsonify({'error': 'An error occurred during registration. Please try again.'}), 500

    login_user(user)
    forget_approval_state()
    flash('Registration successful! Your account is awaiting approval.', 'info')
    return redirect(url_for('public.welcome'))


@auth_bp.route('/auth/logout')
@login_required
def logout():
    forget_approval_state()
    logout_user()
    flash('You have been logged out successfully.', 'info')
    return redirect(url_for('auth.login'))
