"""
Domain errors raised by the services and rendered as JSON by the app
"""


class ERPError(Exception):
    status_code = 400

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.message = message
        self.errors = errors or {}

    def to_dict(self):
        payload = {'success': False, 'message': self.message}
        if self.errors:
            payload['errors'] = self.errors
        return payload


class ValidationError(ERPError):
    """Missing field, empty item list, bad number or unknown enum value"""
    status_code = 400


class PermissionDenied(ERPError):
    status_code = 403

    def __init__(self, message='You do not have permission to perform this action.', errors=None):
        super().__init__(message, errors)


class NotFoundError(ERPError):
    status_code = 404


class InvalidTransitionError(ERPError):
    """Lifecycle action not allowed from the document's current state"""
    status_code = 409

    def __init__(self, current, target, message=None):
        current_value = getattr(current, 'value', current)
        target_value = getattr(target, 'value', target)
        super().__init__(message or f'Cannot move from {current_value} to {target_value}')
        self.current = current
        self.target = target


class ConflictError(ERPError):
    """Derived-state conflict such as an overpayment or a duplicate value"""
    status_code = 409
