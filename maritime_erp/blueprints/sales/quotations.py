from flask import jsonify, request
from flask_login import login_required, current_user

from ...forms.common import validate_payload
from ...forms.sales import ConvertQuotationForm
from ...services import quotations as quotation_service
from ...utils.pagination import (
    get_page_args, get_bool_arg, get_date_arg, paginated_response, get_json_payload,
)
from ...utils.permissions import permission_required
from . import sales_bp


@sales_bp.route('/sales-quotations')
@login_required
@permission_required('view_sales')
def quotation_list():
    page, per_page = get_page_args()
    pagination = quotation_service.list_quotations(
        search=request.args.get('search'),
        status=request.args.get('status'),
        customer_id=request.args.get('customer_id', type=int),
        show_archived=bool(get_bool_arg('show_archived')),
        date_from=get_date_arg('date_from'),
        date_to=get_date_arg('date_to'),
        page=page,
        per_page=per_page,
    )
    return jsonify(paginated_response(pagination))


@sales_bp.route('/sales-quotations', methods=['POST'])
@login_required
@permission_required('manage_sales')
def quotation_create():
    quotation = quotation_service.create_quotation(get_json_payload(), current_user._get_current_object())
    return jsonify({'success': True, 'quotation': quotation.to_dict()}), 201


@sales_bp.route('/sales-quotations/<int:quotation_id>')
@login_required
@permission_required('view_sales')
def quotation_detail(quotation_id):
    quotation = quotation_service.get_quotation(quotation_id)
    return jsonify({'success': True, 'quotation': quotation.to_dict()})


@sales_bp.route('/sales-quotations/<int:quotation_id>', methods=['PUT'])
@login_required
@permission_required('manage_sales')
def quotation_update(quotation_id):
    quotation = quotation_service.get_quotation(quotation_id)
    quotation_service.update_quotation(quotation, get_json_payload(), current_user._get_current_object())
    return jsonify({'success': True, 'quotation': quotation.to_dict()})


_ACTIONS = {
    'send': quotation_service.mark_quotation_sent,
    'approve': quotation_service.approve_quotation,
    'reject': quotation_service.reject_quotation,
    'archive': quotation_service.archive_quotation,
    'unarchive': quotation_service.unarchive_quotation,
}


@sales_bp.route('/sales-quotations/<int:quotation_id>/<any(send, approve, reject, archive, unarchive):action>',
                methods=['POST'])
@login_required
@permission_required('view_sales')
def quotation_action(quotation_id, action):
    """Lifecycle actions; each service checks the capability it needs"""
    quotation = quotation_service.get_quotation(quotation_id)
    _ACTIONS[action](quotation, current_user._get_current_object())
    return jsonify({'success': True, 'quotation': quotation.to_dict()})


@sales_bp.route('/sales-quotations/<int:quotation_id>/convert', methods=['POST'])
@login_required
@permission_required('manage_sales')
def quotation_convert(quotation_id):
    quotation = quotation_service.get_quotation(quotation_id)
    data = validate_payload(ConvertQuotationForm, get_json_payload() or {})
    invoice = quotation_service.convert_quotation_to_invoice(
        quotation, current_user._get_current_object(), project_id=data.get('project_id')
    )
    return jsonify({'success': True, 'quotation': quotation.to_dict(), 'invoice': invoice.to_dict()}), 201
