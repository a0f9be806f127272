from flask import jsonify, request
from flask_login import login_required, current_user

from ...services import credit_notes as credit_note_service
from ...utils.pagination import get_page_args, paginated_response, get_json_payload
from ...utils.permissions import permission_required
from . import sales_bp


@sales_bp.route('/credit-notes')
@login_required
@permission_required('view_sales')
def credit_note_list():
    page, per_page = get_page_args()
    pagination = credit_note_service.list_credit_notes(
        sales_invoice_id=request.args.get('sales_invoice_id', type=int),
        customer_id=request.args.get('customer_id', type=int),
        status=request.args.get('status'),
        page=page,
        per_page=per_page,
    )
    return jsonify(paginated_response(pagination))


@sales_bp.route('/credit-notes', methods=['POST'])
@login_required
@permission_required('manage_sales')
def credit_note_create():
    credit_note = credit_note_service.create_credit_note(get_json_payload(), current_user._get_current_object())
    return jsonify({'success': True, 'credit_note': credit_note.to_dict()}), 201


@sales_bp.route('/credit-notes/<int:credit_note_id>')
@login_required
@permission_required('view_sales')
def credit_note_detail(credit_note_id):
    credit_note = credit_note_service.get_credit_note(credit_note_id)
    return jsonify({'success': True, 'credit_note': credit_note.to_dict()})


@sales_bp.route('/credit-notes/<int:credit_note_id>/<any(issue, cancel):action>', methods=['POST'])
@login_required
@permission_required('view_sales')
def credit_note_action(credit_note_id, action):
    credit_note = credit_note_service.get_credit_note(credit_note_id)
    if action == 'issue':
        credit_note_service.issue_credit_note(credit_note, current_user._get_current_object())
    else:
        credit_note_service.cancel_credit_note(credit_note, current_user._get_current_object())
    return jsonify({'success': True, 'credit_note': credit_note.to_dict()})


@sales_bp.route('/credit-notes/<int:credit_note_id>/apply', methods=['POST'])
@login_required
@permission_required('record_payments')
def credit_note_apply(credit_note_id):
    credit_note = credit_note_service.get_credit_note(credit_note_id)
    payment = credit_note_service.apply_credit_note(credit_note, current_user._get_current_object())
    return jsonify({'success': True, 'credit_note': credit_note.to_dict(), 'payment': payment.to_dict()})
