from flask import jsonify, request
from flask_login import login_required, current_user

from ...forms.common import validate_payload
from ...forms.sales import ReasonForm
from ...services import purchases as purchase_service
from ...utils.pagination import get_page_args, paginated_response, get_json_payload
from ...utils.permissions import permission_required
from . import purchases_bp


@purchases_bp.route('/purchase-invoices')
@login_required
@permission_required('manage_purchases')
def purchase_invoice_list():
    page, per_page = get_page_args()
    pagination = purchase_service.list_purchase_invoices(
        search=request.args.get('search'),
        status=request.args.get('status'),
        approval_status=request.args.get('approval_status'),
        supplier_id=request.args.get('supplier_id', type=int),
        page=page,
        per_page=per_page,
    )
    return jsonify(paginated_response(pagination))


@purchases_bp.route('/purchase-invoices', methods=['POST'])
@login_required
@permission_required('manage_purchases')
def purchase_invoice_create():
    invoice = purchase_service.create_purchase_invoice(get_json_payload(), current_user._get_current_object())
    return jsonify({'success': True, 'purchase_invoice': invoice.to_dict()}), 201


@purchases_bp.route('/purchase-invoices/<int:invoice_id>')
@login_required
@permission_required('manage_purchases')
def purchase_invoice_detail(invoice_id):
    invoice = purchase_service.get_purchase_invoice(invoice_id)
    data = invoice.to_dict()
    data['payments'] = [payment.to_dict() for payment in invoice.payments]
    return jsonify({'success': True, 'purchase_invoice': data})


@purchases_bp.route('/purchase-invoices/<int:invoice_id>/approve', methods=['POST'])
@login_required
@permission_required('approve_purchases')
def purchase_invoice_approve(invoice_id):
    invoice = purchase_service.get_purchase_invoice(invoice_id)
    purchase_service.approve_purchase_invoice(invoice, current_user._get_current_object())
    return jsonify({'success': True, 'purchase_invoice': invoice.to_dict()})


@purchases_bp.route('/purchase-invoices/<int:invoice_id>/reject', methods=['POST'])
@login_required
@permission_required('approve_purchases')
def purchase_invoice_reject(invoice_id):
    invoice = purchase_service.get_purchase_invoice(invoice_id)
    data = validate_payload(ReasonForm, get_json_payload() or {})
    purchase_service.reject_purchase_invoice(invoice, current_user._get_current_object(), reason=data.get('reason'))
    return jsonify({'success': True, 'purchase_invoice': invoice.to_dict()})


@purchases_bp.route('/purchase-invoices/<int:invoice_id>/payments', methods=['POST'])
@login_required
@permission_required('record_payments')
def purchase_invoice_add_payment(invoice_id):
    invoice = purchase_service.get_purchase_invoice(invoice_id)
    payment = purchase_service.record_purchase_payment(invoice, get_json_payload(), current_user._get_current_object())
    return jsonify({'success': True, 'payment': payment.to_dict(), 'purchase_invoice': payment.invoice.to_dict()}), 201
