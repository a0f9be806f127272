from .. import db
from datetime import datetime

from ..utils.money import format_money

PROJECT_STATUSES = ('planning', 'active', 'on_hold', 'completed', 'cancelled')


class Project(db.Model):
    __tablename__ = 'projects'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    vessel_name = db.Column(db.String(200))
    vessel_imo_number = db.Column(db.String(20))
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'))
    location = db.Column(db.String(200))
    status = db.Column(db.String(20), nullable=False, default='planning')
    start_date = db.Column(db.Date)
    planned_end_date = db.Column(db.Date)
    estimated_budget = db.Column(db.Numeric(12, 2))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    EDITABLE_FIELDS = (
        'title', 'description', 'vessel_name', 'vessel_imo_number', 'customer_id',
        'location', 'status', 'start_date', 'planned_end_date', 'estimated_budget',
    )

    invoices = db.relationship('SalesInvoice', backref='project', lazy=True)

    def form_data(self):
        return {field: getattr(self, field) for field in self.EDITABLE_FIELDS}

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'vessel_name': self.vessel_name,
            'vessel_imo_number': self.vessel_imo_number,
            'customer_id': self.customer_id,
            'customer_name': self.customer.name if self.customer else None,
            'location': self.location,
            'status': self.status,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'planned_end_date': self.planned_end_date.isoformat() if self.planned_end_date else None,
            'estimated_budget': format_money(self.estimated_budget),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Project {self.title}>'
