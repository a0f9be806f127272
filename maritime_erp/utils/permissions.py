"""
Permission and role checking utilities
"""

from functools import wraps
from flask import jsonify
from flask_login import current_user

from ..errors import PermissionDenied

ROLE_PERMISSIONS = {
    'admin': {
        'view_master_data', 'manage_master_data', 'manage_projects',
        'view_sales', 'manage_sales', 'approve_sales', 'record_payments',
        'manage_purchases', 'approve_purchases', 'manage_ledger',
        'manage_error_logs', 'manage_users',
    },
    'finance': {
        'view_master_data', 'view_sales', 'manage_sales', 'record_payments',
        'manage_purchases', 'manage_ledger',
    },
    'project_manager': {
        'view_master_data', 'manage_master_data', 'manage_projects', 'manage_purchases',
    },
    'employee': {'view_master_data'},
    'customer': set(),
}


def role_has_permission(role, permission):
    return permission in ROLE_PERMISSIONS.get(role, set())


def ensure_permission(actor, permission):
    """
    Capability check used by lifecycle operations.
    The acting user is passed in explicitly; nothing is read from the request.
    """
    if actor is None or not getattr(actor, 'is_active', False) or not actor.has_permission(permission):
        raise PermissionDenied()


def permission_required(*permissions):
    """
    Decorator to require all listed permissions for a JSON route
    Usage: @permission_required('manage_sales')
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                return jsonify({'success': False, 'message': 'Please log in to access this resource.'}), 401

            missing = [p for p in permissions if not current_user.has_permission(p)]
            if missing:
                return jsonify({'success': False, 'message': 'You do not have permission to access this resource.'}), 403

            return f(*args, **kwargs)
        return decorated_function
    return decorator


def admin_required(f):
    """Decorator to require the admin role"""
    return permission_required('manage_users')(f)
