from flask import jsonify, request
from flask_login import login_required, current_user

from ...forms.common import validate_payload
from ...forms.purchases import ConvertRequestForm
from ...forms.sales import ReasonForm
from ...services import purchases as purchase_service
from ...utils.pagination import get_page_args, paginated_response, get_json_payload
from ...utils.permissions import permission_required
from . import purchases_bp


@purchases_bp.route('/purchase-requests')
@login_required
@permission_required('manage_purchases')
def purchase_request_list():
    page, per_page = get_page_args()
    pagination = purchase_service.list_purchase_requests(
        status=request.args.get('status'),
        urgency=request.args.get('urgency'),
        page=page,
        per_page=per_page,
    )
    return jsonify(paginated_response(pagination))


@purchases_bp.route('/purchase-requests', methods=['POST'])
@login_required
@permission_required('manage_purchases')
def purchase_request_create():
    purchase_request = purchase_service.create_purchase_request(
        get_json_payload(), current_user._get_current_object()
    )
    return jsonify({'success': True, 'purchase_request': purchase_request.to_dict()}), 201


@purchases_bp.route('/purchase-requests/<int:request_id>')
@login_required
@permission_required('manage_purchases')
def purchase_request_detail(request_id):
    purchase_request = purchase_service.get_purchase_request(request_id)
    return jsonify({'success': True, 'purchase_request': purchase_request.to_dict()})


@purchases_bp.route('/purchase-requests/<int:request_id>/approve', methods=['POST'])
@login_required
@permission_required('approve_purchases')
def purchase_request_approve(request_id):
    purchase_request = purchase_service.get_purchase_request(request_id)
    purchase_service.approve_purchase_request(purchase_request, current_user._get_current_object())
    return jsonify({'success': True, 'purchase_request': purchase_request.to_dict()})


@purchases_bp.route('/purchase-requests/<int:request_id>/reject', methods=['POST'])
@login_required
@permission_required('approve_purchases')
def purchase_request_reject(request_id):
    purchase_request = purchase_service.get_purchase_request(request_id)
    data = validate_payload(ReasonForm, get_json_payload() or {})
    purchase_service.reject_purchase_request(
        purchase_request, current_user._get_current_object(), reason=data.get('reason')
    )
    return jsonify({'success': True, 'purchase_request': purchase_request.to_dict()})


@purchases_bp.route('/purchase-requests/<int:request_id>/convert', methods=['POST'])
@login_required
@permission_required('manage_purchases')
def purchase_request_convert(request_id):
    purchase_request = purchase_service.get_purchase_request(request_id)
    data = validate_payload(ConvertRequestForm, get_json_payload())
    order = purchase_service.convert_request_to_order(
        purchase_request, data['supplier_id'], current_user._get_current_object()
    )
    return jsonify({
        'success': True,
        'purchase_request': purchase_request.to_dict(),
        'purchase_order': order.to_dict(),
    }), 201
