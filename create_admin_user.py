#!/usr/bin/env python3
"""
Create (or reset the password of) a user account.
Usage: python create_admin_user.py <username> <email> [role]
The password is read from ADMIN_PASSWORD or prompted for.
"""
import getpass
import os
import sys

from maritime_erp import create_app, db
from maritime_erp.models import User
from maritime_erp.models.user import USER_ROLES


def create_user(username, email, role='admin', password=None):
    if role not in USER_ROLES:
        raise SystemExit(f"Unknown role '{role}'. Choose one of: {', '.join(USER_ROLES)}")

    app = create_app()
    with app.app_context():
        user = User.query.filter_by(username=username).first()
        if user:
            print(f"User {username} exists, updating password and role")
        else:
            user = User(username=username, email=email, is_active=True)
            db.session.add(user)
        user.role = role
        user.set_password(password)
        db.session.commit()
        print(f"✓ {user.username} ({user.role}) saved")


if __name__ == '__main__':
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)
    password = os.environ.get('ADMIN_PASSWORD') or getpass.getpass('Password: ')
    create_user(sys.argv[1], sys.argv[2], sys.argv[3] if len(sys.argv) > 3 else 'admin', password)
