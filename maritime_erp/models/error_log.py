from .. import db
from datetime import datetime

from .base import isoformat

SEVERITIES = ('info', 'warning', 'error', 'critical')


class ErrorLog(db.Model):
    __tablename__ = 'error_logs'

    id = db.Column(db.Integer, primary_key=True)
    message = db.Column(db.Text, nullable=False)
    stack = db.Column(db.Text)
    url = db.Column(db.String(500))
    user_agent = db.Column(db.String(500))
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    severity = db.Column(db.String(10), nullable=False, default='error')
    component = db.Column(db.String(100))
    resolved = db.Column(db.Boolean, nullable=False, default=False)

    def to_dict(self):
        return {
            'id': self.id,
            'message': self.message,
            'stack': self.stack,
            'url': self.url,
            'user_agent': self.user_agent,
            'user_id': self.user_id,
            'timestamp': isoformat(self.timestamp),
            'severity': self.severity,
            'component': self.component,
            'resolved': self.resolved,
        }

    def __repr__(self):
        return f'<ErrorLog {self.id} {self.severity}>'
