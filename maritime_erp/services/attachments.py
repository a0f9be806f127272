"""
Payment attachments on local disk under UPLOAD_FOLDER/payments.

Files are written before the database commit; callers remove them again with
remove_files() when the commit fails, so a payment and its files are stored
together or not at all.
"""
import os
import uuid

from flask import current_app
from werkzeug.utils import secure_filename

from .. import db
from ..errors import ValidationError
from ..models import PaymentFile
from ..utils.permissions import ensure_permission
from . import get_or_404, commit_or_rollback


def _payments_dir():
    path = os.path.join(current_app.config['UPLOAD_FOLDER'], 'payments')
    os.makedirs(path, exist_ok=True)
    return path


def _extension(filename):
    return filename.rsplit('.', 1)[1].lower() if '.' in filename else ''


def check_files(files):
    """Reject unsupported uploads before anything is written"""
    allowed = current_app.config['ALLOWED_ATTACHMENT_EXTENSIONS']
    errors = []
    for storage in files or []:
        name = secure_filename(storage.filename or '')
        if not name or _extension(name) not in allowed:
            errors.append(f'{storage.filename or "(unnamed)"}: file type not allowed')
    if errors:
        raise ValidationError('Invalid attachment', {'files': errors})


def save_payment_files(payment, files):
    """Write uploads to disk and attach PaymentFile rows; returns the written paths"""
    written = []
    directory = _payments_dir()
    try:
        for storage in files or []:
            original_name = storage.filename
            stored_name = f'{uuid.uuid4().hex}_{secure_filename(original_name)}'
            path = os.path.join(directory, stored_name)
            storage.save(path)
            written.append(path)

            payment.files.append(PaymentFile(
                file_name=stored_name,
                original_name=original_name,
                file_path=path,
                file_size=os.path.getsize(path),
                mime_type=storage.mimetype,
            ))
    except Exception:
        remove_files(written)
        raise
    return written


def remove_files(paths):
    for path in paths:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError:
            current_app.logger.exception(f'Could not remove attachment {path}')


def list_invoice_files(invoice):
    return [f for payment in invoice.payments for f in payment.files]


def get_payment_file(file_id):
    return get_or_404(PaymentFile, file_id, 'Payment file')


def delete_payment_file(payment_file, actor):
    ensure_permission(actor, 'record_payments')
    path = payment_file.file_path
    db.session.delete(payment_file)
    commit_or_rollback()
    remove_files([path])
    current_app.logger.info(f'Payment file {payment_file.id} deleted by {actor.username}')
