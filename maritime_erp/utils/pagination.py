from datetime import datetime

from flask import current_app, request

from ..errors import ValidationError


def get_page_args():
    """Read ?page= and ?per_page= (or ?limit=) with configured bounds"""
    page = request.args.get('page', 1, type=int) or 1
    per_page = request.args.get('per_page', type=int) or request.args.get('limit', type=int) \
        or current_app.config.get('ITEMS_PER_PAGE', 10)
    per_page = min(max(per_page, 1), current_app.config.get('MAX_ITEMS_PER_PAGE', 100))
    return max(page, 1), per_page


def get_bool_arg(name):
    """'true' -> True, 'false' -> False, anything else -> None"""
    value = request.args.get(name)
    if value is None:
        return None
    value = value.lower()
    if value == 'true':
        return True
    if value == 'false':
        return False
    return None


def paginated_response(pagination, serializer=None):
    serializer = serializer or (lambda obj: obj.to_dict())
    return {
        'success': True,
        'items': [serializer(item) for item in pagination.items],
        'total': pagination.total,
        'page': pagination.page,
        'pages': pagination.pages,
        'per_page': pagination.per_page,
    }


def get_date_arg(name):
    """?name=YYYY-MM-DD -> date (None when absent)"""
    value = request.args.get(name)
    if not value:
        return None
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError('Invalid filter', {name: ['Use the YYYY-MM-DD format']})


def get_json_payload():
    """Request JSON body, or the form fields of a multipart request"""
    if request.is_json:
        return request.get_json(silent=True)
    return request.form.to_dict()
