from flask import jsonify, request
from flask_login import login_required, current_user

from ...services import purchases as purchase_service
from ...utils.pagination import get_page_args, paginated_response, get_json_payload
from ...utils.permissions import permission_required
from . import purchases_bp

_ACTIONS = {
    'send': purchase_service.send_purchase_order,
    'confirm': purchase_service.confirm_purchase_order,
    'receive': purchase_service.receive_purchase_order,
    'cancel': purchase_service.cancel_purchase_order,
}


@purchases_bp.route('/purchase-orders')
@login_required
@permission_required('manage_purchases')
def purchase_order_list():
    page, per_page = get_page_args()
    pagination = purchase_service.list_purchase_orders(
        search=request.args.get('search'),
        status=request.args.get('status'),
        supplier_id=request.args.get('supplier_id', type=int),
        page=page,
        per_page=per_page,
    )
    return jsonify(paginated_response(pagination))


@purchases_bp.route('/purchase-orders', methods=['POST'])
@login_required
@permission_required('manage_purchases')
def purchase_order_create():
    order = purchase_service.create_purchase_order(get_json_payload(), current_user._get_current_object())
    return jsonify({'success': True, 'purchase_order': order.to_dict()}), 201


@purchases_bp.route('/purchase-orders/<int:order_id>')
@login_required
@permission_required('manage_purchases')
def purchase_order_detail(order_id):
    order = purchase_service.get_purchase_order(order_id)
    return jsonify({'success': True, 'purchase_order': order.to_dict()})


@purchases_bp.route('/purchase-orders/<int:order_id>', methods=['PUT'])
@login_required
@permission_required('manage_purchases')
def purchase_order_update(order_id):
    order = purchase_service.get_purchase_order(order_id)
    purchase_service.update_purchase_order(order, get_json_payload(), current_user._get_current_object())
    return jsonify({'success': True, 'purchase_order': order.to_dict()})


@purchases_bp.route('/purchase-orders/<int:order_id>/<any(send, confirm, receive, cancel):action>',
                    methods=['POST'])
@login_required
@permission_required('manage_purchases')
def purchase_order_action(order_id, action):
    order = purchase_service.get_purchase_order(order_id)
    _ACTIONS[action](order, current_user._get_current_object())
    return jsonify({'success': True, 'purchase_order': order.to_dict()})


@purchases_bp.route('/purchase-orders/<int:order_id>/convert-to-invoice', methods=['POST'])
@login_required
@permission_required('manage_purchases')
def purchase_order_convert(order_id):
    order = purchase_service.get_purchase_order(order_id)
    data = get_json_payload() or {}
    invoice = purchase_service.convert_order_to_invoice(
        order,
        data.get('invoice_number'),
        data.get('invoice_date'),
        data.get('due_date'),
        current_user._get_current_object(),
    )
    return jsonify({'success': True, 'purchase_invoice': invoice.to_dict()}), 201
