from flask import jsonify, request
from flask_login import login_required, current_user

from ... import csrf
from ...services import error_logs as error_log_service
from ...utils.pagination import get_page_args, get_bool_arg, paginated_response, get_json_payload
from ...utils.permissions import permission_required
from . import error_logs_bp


@error_logs_bp.route('', methods=['POST'])
@csrf.exempt
def error_log_create():
    """Client-side error reports; open to anonymous clients"""
    data = get_json_payload() or {}
    if 'user_agent' not in data:
        data['user_agent'] = request.headers.get('User-Agent')
    log = error_log_service.create_error_log(
        data,
        user_id=current_user.id if current_user.is_authenticated else None,
    )
    return jsonify({'success': True, 'error_log': log.to_dict()}), 201


@error_logs_bp.route('')
@login_required
@permission_required('manage_error_logs')
def error_log_list():
    page, per_page = get_page_args()
    pagination = error_log_service.list_error_logs(
        severity=request.args.get('severity'),
        resolved=get_bool_arg('resolved'),
        page=page,
        per_page=per_page,
    )
    return jsonify(paginated_response(pagination))


@error_logs_bp.route('/<int:log_id>/resolve', methods=['POST'])
@login_required
@permission_required('manage_error_logs')
def error_log_resolve(log_id):
    log = error_log_service.get_error_log(log_id)
    error_log_service.resolve_error_log(log, current_user._get_current_object())
    return jsonify({'success': True, 'error_log': log.to_dict()})


@error_logs_bp.route('', methods=['DELETE'])
@login_required
@permission_required('manage_error_logs')
def error_log_clear():
    deleted = error_log_service.clear_error_logs(current_user._get_current_object())
    return jsonify({'success': True, 'deleted': deleted})


@error_logs_bp.route('/resolved', methods=['DELETE'])
@login_required
@permission_required('manage_error_logs')
def error_log_clear_resolved():
    deleted = error_log_service.clear_resolved_error_logs(current_user._get_current_object())
    return jsonify({'success': True, 'deleted': deleted})
