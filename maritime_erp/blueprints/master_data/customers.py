from flask import jsonify, request
from flask_login import login_required, current_user

from ...services import master_data
from ...utils.pagination import get_page_args, get_bool_arg, paginated_response, get_json_payload
from ...utils.permissions import permission_required
from . import master_data_bp


@master_data_bp.route('/customers')
@login_required
@permission_required('view_master_data')
def customer_list():
    page, per_page = get_page_args()
    pagination = master_data.list_customers(
        search=request.args.get('search'),
        show_archived=bool(get_bool_arg('show_archived')),
        page=page,
        per_page=per_page,
    )
    return jsonify(paginated_response(pagination))


@master_data_bp.route('/customers', methods=['POST'])
@login_required
@permission_required('manage_master_data')
def customer_create():
    customer = master_data.create_customer(get_json_payload(), current_user._get_current_object())
    return jsonify({'success': True, 'customer': customer.to_dict()}), 201


@master_data_bp.route('/customers/<int:customer_id>')
@login_required
@permission_required('view_master_data')
def customer_detail(customer_id):
    customer = master_data.get_customer(customer_id)
    return jsonify({'success': True, 'customer': customer.to_dict()})


@master_data_bp.route('/customers/<int:customer_id>', methods=['PUT'])
@login_required
@permission_required('manage_master_data')
def customer_update(customer_id):
    customer = master_data.get_customer(customer_id)
    master_data.update_customer(customer, get_json_payload(), current_user._get_current_object())
    return jsonify({'success': True, 'customer': customer.to_dict()})


@master_data_bp.route('/customers/<int:customer_id>/archive', methods=['POST'])
@login_required
@permission_required('manage_master_data')
def customer_archive(customer_id):
    customer = master_data.get_customer(customer_id)
    master_data.archive_customer(customer, current_user._get_current_object())
    return jsonify({'success': True, 'customer': customer.to_dict()})


@master_data_bp.route('/customers/<int:customer_id>/unarchive', methods=['POST'])
@login_required
@permission_required('manage_master_data')
def customer_unarchive(customer_id):
    customer = master_data.get_customer(customer_id)
    master_data.unarchive_customer(customer, current_user._get_current_object())
    return jsonify({'success': True, 'customer': customer.to_dict()})
