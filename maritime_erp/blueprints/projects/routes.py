from flask import jsonify, request
from flask_login import login_required, current_user

from ...services import projects as project_service
from ...utils.pagination import get_page_args, paginated_response, get_json_payload
from ...utils.permissions import permission_required
from . import projects_bp


@projects_bp.route('')
@login_required
@permission_required('view_master_data')
def project_list():
    page, per_page = get_page_args()
    pagination = project_service.list_projects(
        search=request.args.get('search'),
        status=request.args.get('status'),
        customer_id=request.args.get('customer_id', type=int),
        page=page,
        per_page=per_page,
    )
    return jsonify(paginated_response(pagination))


@projects_bp.route('', methods=['POST'])
@login_required
@permission_required('manage_projects')
def project_create():
    project = project_service.create_project(get_json_payload(), current_user._get_current_object())
    return jsonify({'success': True, 'project': project.to_dict()}), 201


@projects_bp.route('/<int:project_id>')
@login_required
@permission_required('view_master_data')
def project_detail(project_id):
    project = project_service.get_project(project_id)
    return jsonify({'success': True, 'project': project.to_dict()})


@projects_bp.route('/<int:project_id>', methods=['PUT'])
@login_required
@permission_required('manage_projects')
def project_update(project_id):
    project = project_service.get_project(project_id)
    project_service.update_project(project, get_json_payload(), current_user._get_current_object())
    return jsonify({'success': True, 'project': project.to_dict()})
