from flask import current_app
from sqlalchemy import or_

from .. import db
from ..forms.common import validate_payload
from ..forms.projects import ProjectForm
from ..models import Project, Customer
from ..utils.permissions import ensure_permission
from . import get_or_404, commit_or_rollback


def _check_customer(cleaned):
    if cleaned.get('customer_id') is not None:
        get_or_404(Customer, cleaned['customer_id'], 'Customer')


def create_project(data, actor):
    ensure_permission(actor, 'manage_projects')
    cleaned = validate_payload(ProjectForm, data)
    _check_customer(cleaned)

    project = Project(**cleaned)
    db.session.add(project)
    commit_or_rollback()
    current_app.logger.info(f'Project {project.id} "{project.title}" created by {actor.username}')
    return project


def update_project(project, data, actor):
    ensure_permission(actor, 'manage_projects')
    cleaned = validate_payload(ProjectForm, data, defaults=project.form_data())
    _check_customer(cleaned)

    for field, value in cleaned.items():
        setattr(project, field, value)
    commit_or_rollback()
    current_app.logger.info(f'Project {project.id} updated by {actor.username}')
    return project


def get_project(project_id):
    return get_or_404(Project, project_id, 'Project')


def list_projects(search=None, status=None, customer_id=None, page=1, per_page=10):
    query = Project.query
    if search:
        term = f'%{search}%'
        query = query.filter(or_(
            Project.title.ilike(term),
            Project.vessel_name.ilike(term),
            Project.vessel_imo_number.ilike(term),
            Project.location.ilike(term),
        ))
    if status:
        query = query.filter(Project.status == status)
    if customer_id:
        query = query.filter(Project.customer_id == customer_id)
    return query.order_by(Project.created_at.desc(), Project.id.desc()) \
        .paginate(page=page, per_page=per_page, error_out=False)
