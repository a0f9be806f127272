from wtforms import StringField, TextAreaField, IntegerField, DateField
from wtforms.validators import DataRequired, Length, Optional, NumberRange

from .common import APIForm, FiniteDecimalField, OptionalSelectField
from ..models.error_log import SEVERITIES


class JournalEntryForm(APIForm):
    description = StringField('Description', validators=[
        DataRequired(message='Description is required'),
        Length(max=500)
    ])
    transaction_date = DateField('Transaction Date', format='%Y-%m-%d', validators=[Optional()])
    project_id = IntegerField('Project', validators=[Optional()])
    notes = TextAreaField('Notes', validators=[Optional()])


class JournalLineForm(APIForm):
    account_name = StringField('Account', validators=[
        DataRequired(message='Account is required'),
        Length(max=100)
    ])
    debit_amount = FiniteDecimalField('Debit', validators=[
        Optional(),
        NumberRange(min=0, message='Debit cannot be negative')
    ])
    credit_amount = FiniteDecimalField('Credit', validators=[
        Optional(),
        NumberRange(min=0, message='Credit cannot be negative')
    ])
    description = StringField('Description', validators=[Optional(), Length(max=500)])


class ErrorLogForm(APIForm):
    message = TextAreaField('Message', validators=[DataRequired(message='Message is required')])
    stack = TextAreaField('Stack', validators=[Optional()])
    url = StringField('URL', validators=[Optional(), Length(max=500)])
    user_agent = StringField('User Agent', validators=[Optional(), Length(max=500)])
    severity = OptionalSelectField('Severity', choices=list(SEVERITIES), validators=[Optional()])
    component = StringField('Component', validators=[Optional(), Length(max=100)])
