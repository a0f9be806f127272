"""
Customer and supplier records. Records are never deleted; archiving hides them
from default listings.
"""
from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from .. import db
from ..errors import ConflictError
from ..forms.common import validate_payload
from ..forms.master_data import CustomerForm, SupplierForm
from ..models import Customer, Supplier
from ..utils.permissions import ensure_permission
from . import get_or_404

_PARTIES = {
    Customer: CustomerForm,
    Supplier: SupplierForm,
}


def _check_unique_phone(model, phone, exclude_id=None):
    if model is not Customer or not phone:
        return
    query = Customer.query.filter(Customer.phone == phone)
    if exclude_id is not None:
        query = query.filter(Customer.id != exclude_id)
    if query.first():
        raise ConflictError('A customer with this phone number already exists',
                            {'phone': ['Phone number is already in use']})


def _save(model, obj, label):
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(f'{label} conflicts with an existing record')
    except Exception:
        db.session.rollback()
        raise
    return obj


def _create(model, data, actor):
    ensure_permission(actor, 'manage_master_data')
    cleaned = validate_payload(_PARTIES[model], data)
    _check_unique_phone(model, cleaned.get('phone'))

    obj = model(**cleaned)
    db.session.add(obj)
    _save(model, obj, model.__name__)
    current_app.logger.info(f'{model.__name__} {obj.id} created by {actor.username}')
    return obj


def _update(model, obj, data, actor):
    ensure_permission(actor, 'manage_master_data')
    cleaned = validate_payload(_PARTIES[model], data, defaults=obj.form_data())
    _check_unique_phone(model, cleaned.get('phone'), exclude_id=obj.id)

    for field, value in cleaned.items():
        setattr(obj, field, value)
    _save(model, obj, model.__name__)
    current_app.logger.info(f'{model.__name__} {obj.id} updated by {actor.username}')
    return obj


def _set_archived(model, obj, archived, actor):
    ensure_permission(actor, 'manage_master_data')
    # Repeating the current state is a successful no-op
    if obj.is_archived == archived:
        return obj
    obj.is_archived = archived
    _save(model, obj, model.__name__)
    current_app.logger.info(
        f"{model.__name__} {obj.id} {'archived' if archived else 'unarchived'} by {actor.username}"
    )
    return obj


def _list(model, search=None, show_archived=False, page=1, per_page=10):
    query = model.query
    if not show_archived:
        query = query.filter(model.is_archived.is_(False))
    if search:
        term = f'%{search}%'
        query = query.filter(or_(
            model.name.ilike(term),
            model.email.ilike(term),
            model.phone.ilike(term),
            model.vat_number.ilike(term),
            model.contact_person.ilike(term),
        ))
    return query.order_by(model.name).paginate(page=page, per_page=per_page, error_out=False)


# Customers

def create_customer(data, actor):
    return _create(Customer, data, actor)


def update_customer(customer, data, actor):
    return _update(Customer, customer, data, actor)


def get_customer(customer_id):
    return get_or_404(Customer, customer_id, 'Customer')


def list_customers(search=None, show_archived=False, page=1, per_page=10):
    return _list(Customer, search, show_archived, page, per_page)


def archive_customer(customer, actor):
    return _set_archived(Customer, customer, True, actor)


def unarchive_customer(customer, actor):
    return _set_archived(Customer, customer, False, actor)


# Suppliers

def create_supplier(data, actor):
    return _create(Supplier, data, actor)


def update_supplier(supplier, data, actor):
    return _update(Supplier, supplier, data, actor)


def get_supplier(supplier_id):
    return get_or_404(Supplier, supplier_id, 'Supplier')


def list_suppliers(search=None, show_archived=False, page=1, per_page=10):
    return _list(Supplier, search, show_archived, page, per_page)


def archive_supplier(supplier, actor):
    return _set_archived(Supplier, supplier, True, actor)


def unarchive_supplier(supplier, actor):
    return _set_archived(Supplier, supplier, False, actor)
