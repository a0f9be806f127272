#!/usr/bin/env python3
"""
Drop and recreate every table, then create the admin account again.
Usage: python reset_database.py [--yes]
"""
import os
import sys

from maritime_erp import create_app, db
from maritime_erp.models import User


def reset_database():
    app = create_app()

    with app.app_context():
        print(f"Database: {app.config['SQLALCHEMY_DATABASE_URI']}")
        db.drop_all()
        print("Dropped all tables")

        db.create_all()
        print("Created all tables")

        password = os.environ.get('ADMIN_PASSWORD', 'admin123')
        admin = User(
            username='admin',
            email='admin@maritime-erp.local',
            role='admin',
            is_active=True
        )
        admin.set_password(password)
        db.session.add(admin)
        db.session.commit()
        print("Created admin user (username: admin)")


if __name__ == '__main__':
    if '--yes' not in sys.argv:
        answer = input("This deletes ALL data. Type 'yes' to continue: ")
        if answer.strip().lower() != 'yes':
            print("Aborted")
            sys.exit(1)
    reset_database()
