"""Client and server error reports kept in the database for admins to review"""
import traceback

from flask import current_app

from .. import db
from ..forms.common import validate_payload
from ..forms.ledger import ErrorLogForm
from ..models import ErrorLog
from ..utils.permissions import ensure_permission
from . import get_or_404, commit_or_rollback


def record_error(message, stack=None, url=None, user_agent=None, user_id=None,
                 severity='error', component=None):
    log = ErrorLog(
        message=message,
        stack=stack,
        url=url,
        user_agent=user_agent,
        user_id=user_id,
        severity=severity,
        component=component,
    )
    db.session.add(log)
    commit_or_rollback()
    return log


def create_error_log(data, user_id=None):
    """Validated report coming from a client"""
    cleaned = validate_payload(ErrorLogForm, data)
    return record_error(user_id=user_id, **cleaned)


def record_exception(exc, **context):
    """Store an unhandled server exception; failures here are logged, never raised"""
    try:
        return record_error(
            message=str(exc) or exc.__class__.__name__,
            stack=''.join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
            severity='critical',
            **context
        )
    except Exception:
        current_app.logger.exception('Could not store error log entry')
        return None


def list_error_logs(severity=None, resolved=None, page=1, per_page=10):
    query = ErrorLog.query
    if severity:
        query = query.filter(ErrorLog.severity == severity)
    if resolved is not None:
        query = query.filter(ErrorLog.resolved.is_(resolved))
    return query.order_by(ErrorLog.timestamp.desc(), ErrorLog.id.desc()) \
        .paginate(page=page, per_page=per_page, error_out=False)


def get_error_log(log_id):
    return get_or_404(ErrorLog, log_id, 'Error log')


def resolve_error_log(log, actor):
    ensure_permission(actor, 'manage_error_logs')
    log.resolved = True
    commit_or_rollback()
    return log


def clear_error_logs(actor):
    ensure_permission(actor, 'manage_error_logs')
    deleted = ErrorLog.query.delete()
    commit_or_rollback()
    current_app.logger.info(f'{deleted} error log(s) cleared by {actor.username}')
    return deleted


def clear_resolved_error_logs(actor):
    ensure_permission(actor, 'manage_error_logs')
    deleted = ErrorLog.query.filter(ErrorLog.resolved.is_(True)).delete()
    commit_or_rollback()
    current_app.logger.info(f'{deleted} resolved error log(s) cleared by {actor.username}')
    return deleted
