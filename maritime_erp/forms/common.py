"""
Payload validation on top of Flask-WTF forms.

API handlers receive JSON, so the dictionaries are turned into form data before
validation. Forms declared here have CSRF disabled; CSRFProtect guards the
requests themselves.
"""
from datetime import date, datetime
from decimal import Decimal

from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import StringField, DecimalField, SelectField
from wtforms.validators import DataRequired, InputRequired, NumberRange, Optional, Length
from wtforms.validators import ValidationError as FieldValidationError

from ..errors import ValidationError


class APIForm(FlaskForm):
    class Meta:
        csrf = False


class FiniteDecimalField(DecimalField):
    """DecimalField that refuses NaN and infinities"""

    def process_formdata(self, valuelist):
        super().process_formdata(valuelist)
        if self.data is not None and not self.data.is_finite():
            self.data = None
            raise ValueError(self.gettext('Not a valid decimal value.'))


class OptionalSelectField(SelectField):
    """SelectField whose choice check only runs when a value was submitted"""

    def pre_validate(self, form):
        if self.data in (None, ''):
            return
        super().pre_validate(form)


def positive(message='Must be greater than zero'):
    def _positive(form, field):
        if field.data is not None and (not field.data.is_finite() or field.data <= 0):
            raise FieldValidationError(message)
    return _positive


def not_before(other_field, message=None):
    """Date must be on or after another date field of the same form"""
    def _not_before(form, field):
        other = form[other_field].data
        if field.data and other and field.data < other:
            raise FieldValidationError(message or f'Must not be before {other_field}')
    return _not_before


def _form_value(value):
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (date, datetime)):
        return value.isoformat()[:10]
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, (Decimal, int)):
        return str(value)
    if hasattr(value, 'value'):
        return str(value.value)
    return str(value)


def to_formdata(data):
    formdata = MultiDict()
    for key, value in data.items():
        if value is None or isinstance(value, (list, dict)):
            continue
        formdata.add(key, _form_value(value))
    return formdata


def validate_payload(form_class, data, defaults=None):
    """
    Validate a JSON payload with a form class.

    defaults are merged under data (used to re-validate the whole record on
    partial updates). Returns {field: value} for the fields present in the
    merged payload, raises ValidationError with the form errors otherwise.
    Without defaults (creation) null fields are left out so column defaults apply.
    """
    if data is None or not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')

    if defaults is None:
        merged = {key: value for key, value in data.items() if value is not None}
    else:
        merged = dict(defaults)
        merged.update(data)

    form = form_class(formdata=to_formdata(merged))
    if not form.validate():
        raise ValidationError('Validation failed', form.errors)

    return {name: field.data for name, field in form._fields.items() if name in merged}


class LineItemForm(APIForm):
    description = StringField('Description', validators=[
        DataRequired(message='Description is required'),
        Length(max=500)
    ])
    quantity = FiniteDecimalField('Quantity', validators=[
        InputRequired(message='Quantity is required'),
        positive('Quantity must be greater than zero')
    ])
    unit_price = FiniteDecimalField('Unit Price', validators=[
        InputRequired(message='Unit price is required'),
        NumberRange(min=0, message='Unit price cannot be negative')
    ])
    tax_rate = FiniteDecimalField('Tax Rate (%)', validators=[
        Optional(),
        NumberRange(min=0, max=100, message='Tax rate must be between 0 and 100')
    ])
    tax_amount = FiniteDecimalField('Tax Amount', validators=[
        Optional(),
        NumberRange(min=0, message='Tax amount cannot be negative')
    ])


def validate_line_items(items, form_class=LineItemForm):
    """Validate every item; errors are keyed as items[<index>].<field>"""
    if not isinstance(items, list) or not items:
        raise ValidationError('At least one line item is required',
                              {'items': ['At least one line item is required']})

    cleaned = []
    errors = {}
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            errors[f'items[{index}]'] = ['Line item must be an object']
            continue
        form = form_class(formdata=to_formdata(item))
        if not form.validate():
            for field, messages in form.errors.items():
                errors[f'items[{index}].{field}'] = messages
            continue
        cleaned.append({name: field.data for name, field in form._fields.items()})

    if errors:
        raise ValidationError('Invalid line items', errors)
    return cleaned
