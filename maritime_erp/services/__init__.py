"""
Domain operations. Every lifecycle function takes the acting user explicitly,
checks its capability, and commits once at the end.
"""
from .. import db
from ..errors import NotFoundError


def get_or_404(model, object_id, label=None):
    obj = db.session.get(model, object_id) if object_id is not None else None
    if obj is None:
        raise NotFoundError(f'{label or model.__name__} {object_id} not found')
    return obj


def commit_or_rollback():
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
