from wtforms import StringField, TextAreaField, IntegerField, DateField
from wtforms.validators import DataRequired, Length, Optional, NumberRange

from .common import APIForm, FiniteDecimalField, OptionalSelectField, not_before
from ..models.project import PROJECT_STATUSES


class ProjectForm(APIForm):
    title = StringField('Title', validators=[
        DataRequired(message='Title is required'),
        Length(max=200)
    ])
    description = TextAreaField('Description', validators=[Optional()])
    vessel_name = StringField('Vessel Name', validators=[Optional(), Length(max=200)])
    vessel_imo_number = StringField('IMO Number', validators=[Optional(), Length(max=20)])
    customer_id = IntegerField('Customer', validators=[Optional()])
    location = StringField('Location', validators=[Optional(), Length(max=200)])
    status = OptionalSelectField('Status', choices=list(PROJECT_STATUSES), validators=[Optional()])
    start_date = DateField('Start Date', format='%Y-%m-%d', validators=[Optional()])
    planned_end_date = DateField('Planned End Date', format='%Y-%m-%d', validators=[
        Optional(),
        not_before('start_date', 'Planned end date cannot be before the start date')
    ])
    estimated_budget = FiniteDecimalField('Estimated Budget', validators=[
        Optional(),
        NumberRange(min=0, message='Budget cannot be negative')
    ])
