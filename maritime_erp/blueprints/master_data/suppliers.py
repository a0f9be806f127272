from flask import jsonify, request
from flask_login import login_required, current_user

from ...services import master_data
from ...utils.money import format_money
from ...utils.pagination import get_page_args, get_bool_arg, paginated_response, get_json_payload
from ...utils.permissions import permission_required
from . import master_data_bp


@master_data_bp.route('/suppliers')
@login_required
@permission_required('view_master_data')
def supplier_list():
    page, per_page = get_page_args()
    pagination = master_data.list_suppliers(
        search=request.args.get('search'),
        show_archived=bool(get_bool_arg('show_archived')),
        page=page,
        per_page=per_page,
    )
    return jsonify(paginated_response(pagination))


@master_data_bp.route('/suppliers', methods=['POST'])
@login_required
@permission_required('manage_master_data')
def supplier_create():
    supplier = master_data.create_supplier(get_json_payload(), current_user._get_current_object())
    return jsonify({'success': True, 'supplier': supplier.to_dict()}), 201


@master_data_bp.route('/suppliers/<int:supplier_id>')
@login_required
@permission_required('view_master_data')
def supplier_detail(supplier_id):
    supplier = master_data.get_supplier(supplier_id)

    # Get purchase orders for this supplier
    data = supplier.to_dict()
    data['purchase_orders'] = [
        {'id': po.id, 'po_number': po.po_number, 'status': po.status.value,
         'total_amount': format_money(po.total_amount)}
        for po in sorted(supplier.purchase_orders, key=lambda po: po.id, reverse=True)
    ]
    return jsonify({'success': True, 'supplier': data})


@master_data_bp.route('/suppliers/<int:supplier_id>', methods=['PUT'])
@login_required
@permission_required('manage_master_data')
def supplier_update(supplier_id):
    supplier = master_data.get_supplier(supplier_id)
    master_data.update_supplier(supplier, get_json_payload(), current_user._get_current_object())
    return jsonify({'success': True, 'supplier': supplier.to_dict()})


@master_data_bp.route('/suppliers/<int:supplier_id>/archive', methods=['POST'])
@login_required
@permission_required('manage_master_data')
def supplier_archive(supplier_id):
    supplier = master_data.get_supplier(supplier_id)
    master_data.archive_supplier(supplier, current_user._get_current_object())
    return jsonify({'success': True, 'supplier': supplier.to_dict()})


@master_data_bp.route('/suppliers/<int:supplier_id>/unarchive', methods=['POST'])
@login_required
@permission_required('manage_master_data')
def supplier_unarchive(supplier_id):
    supplier = master_data.get_supplier(supplier_id)
    master_data.unarchive_supplier(supplier, current_user._get_current_object())
    return jsonify({'success': True, 'supplier': supplier.to_dict()})
