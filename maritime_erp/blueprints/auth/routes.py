from flask import jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user
from sqlalchemy import or_

from ... import db
from ...errors import ConflictError
from ...forms.common import validate_payload
from ...models import User
from ...utils.pagination import get_json_payload
from ...utils.permissions import admin_required
from . import auth_bp
from .forms import LoginForm, RegistrationForm, ChangePasswordForm


@auth_bp.route('/login', methods=['POST'])
def login():
    data = validate_payload(LoginForm, get_json_payload())

    user = User.query.filter_by(username=data['username']).first()
    if not user or not user.check_password(data['password']):
        current_app.logger.warning(f"Failed login for {data['username']}")
        return jsonify({'success': False, 'message': 'Invalid username or password.'}), 401
    if not user.is_active:
        return jsonify({'success': False, 'message': 'Your account has been deactivated.'}), 403

    login_user(user, remember=bool(data.get('remember')))
    current_app.logger.info(f'User {user.username} logged in')
    return jsonify({'success': True, 'user': user.to_dict()})


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True, 'message': 'You have been logged out.'})


@auth_bp.route('/me')
@login_required
def me():
    return jsonify({'success': True, 'user': current_user.to_dict()})


@auth_bp.route('/register', methods=['POST'])
@login_required
@admin_required
def register():
    data = validate_payload(RegistrationForm, get_json_payload())

    existing = User.query.filter(or_(User.username == data['username'], User.email == data['email'])).first()
    if existing:
        raise ConflictError('Username or email is already registered')

    user = User(
        username=data['username'],
        email=data['email'],
        role=data['role'],
        is_active=True
    )
    user.set_password(data['password'])
    db.session.add(user)
    db.session.commit()
    current_app.logger.info(f'Account {user.username} ({user.role}) created by {current_user.username}')
    return jsonify({'success': True, 'user': user.to_dict()}), 201


@auth_bp.route('/change-password', methods=['POST'])
@login_required
def change_password():
    data = validate_payload(ChangePasswordForm, get_json_payload())
    if not current_user.check_password(data['old_password']):
        return jsonify({'success': False, 'message': 'Old password is incorrect.'}), 400

    current_user.set_password(data['new_password'])
    db.session.commit()
    return jsonify({'success': True, 'message': 'Your password has been updated!'})
