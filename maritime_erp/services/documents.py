"""Helpers shared by every priced, status-driven document"""
from flask import current_app

from ..errors import InvalidTransitionError, ValidationError
from ..forms.common import LineItemForm, validate_line_items
from ..models.status import ensure_transition
from .totals import compute_totals, normalize_line_items


def apply_line_items(document, items, discount=None, item_form=LineItemForm):
    """Validate items, compute totals and store both on the document"""
    if discount is None:
        discount = document.discount or 0
    cleaned = validate_line_items(items, item_form)
    normalized = normalize_line_items(cleaned)
    totals = compute_totals(normalized, discount)
    document.apply_totals(normalized, totals, discount)
    return totals


def transition(document, target, label, field='status'):
    """Move document.<field> to target or raise InvalidTransitionError (state unchanged)"""
    current = getattr(document, field)
    try:
        ensure_transition(current, target)
    except InvalidTransitionError:
        current_app.logger.warning(
            f'Rejected {label}: cannot move from {current.value} to {target.value}'
        )
        raise
    setattr(document, field, target)
    current_app.logger.info(f'{label}: {current.value} -> {target.value}')


def ensure_editable(document, allowed, label):
    if document.status not in allowed:
        states = ' or '.join(s.value for s in allowed)
        raise InvalidTransitionError(
            document.status, document.status,
            f'{label} can only be edited while {states} (currently {document.status.value})'
        )


def parse_status(enum_cls, value, field='status'):
    """Filter value -> enum member (ValidationError for unknown values)"""
    try:
        return enum_cls(value)
    except ValueError:
        choices = ', '.join(member.value for member in enum_cls)
        raise ValidationError('Invalid filter', {field: [f'Must be one of: {choices}']})
