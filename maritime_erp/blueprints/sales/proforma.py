from flask import jsonify, request
from flask_login import login_required, current_user

from ...services import proforma as proforma_service
from ...utils.pagination import get_page_args, get_bool_arg, paginated_response, get_json_payload
from ...utils.permissions import permission_required
from ...utils.timezone_helper import get_local_date
from . import sales_bp


@sales_bp.route('/proforma-invoices')
@login_required
@permission_required('view_sales')
def proforma_list():
    page, per_page = get_page_args()
    pagination = proforma_service.list_proforma_invoices(
        search=request.args.get('search'),
        status=request.args.get('status'),
        customer_id=request.args.get('customer_id', type=int),
        show_archived=bool(get_bool_arg('show_archived')),
        page=page,
        per_page=per_page,
    )
    return jsonify(paginated_response(pagination))


@sales_bp.route('/proforma-invoices', methods=['POST'])
@login_required
@permission_required('manage_sales')
def proforma_create():
    proforma = proforma_service.create_proforma_invoice(get_json_payload(), current_user._get_current_object())
    return jsonify({'success': True, 'proforma_invoice': proforma.to_dict()}), 201


@sales_bp.route('/proforma-invoices/<int:proforma_id>')
@login_required
@permission_required('view_sales')
def proforma_detail(proforma_id):
    proforma = proforma_service.get_proforma_invoice(proforma_id)
    return jsonify({'success': True, 'proforma_invoice': proforma.to_dict()})


@sales_bp.route('/proforma-invoices/<int:proforma_id>', methods=['PUT'])
@login_required
@permission_required('manage_sales')
def proforma_update(proforma_id):
    proforma = proforma_service.get_proforma_invoice(proforma_id)
    proforma_service.update_proforma_invoice(proforma, get_json_payload(), current_user._get_current_object())
    return jsonify({'success': True, 'proforma_invoice': proforma.to_dict()})


_ACTIONS = {
    'send': proforma_service.mark_proforma_sent,
    'approve': proforma_service.approve_proforma_invoice,
    'reject': proforma_service.reject_proforma_invoice,
    'expire': proforma_service.expire_proforma_invoice,
    'archive': proforma_service.archive_proforma_invoice,
    'unarchive': proforma_service.unarchive_proforma_invoice,
}


@sales_bp.route('/proforma-invoices/<int:proforma_id>/<any(send, approve, reject, expire, archive, unarchive):action>',
                methods=['POST'])
@login_required
@permission_required('view_sales')
def proforma_action(proforma_id, action):
    proforma = proforma_service.get_proforma_invoice(proforma_id)
    _ACTIONS[action](proforma, current_user._get_current_object())
    return jsonify({'success': True, 'proforma_invoice': proforma.to_dict()})


@sales_bp.route('/proforma-invoices/<int:proforma_id>/convert', methods=['POST'])
@login_required
@permission_required('manage_sales')
def proforma_convert(proforma_id):
    proforma = proforma_service.get_proforma_invoice(proforma_id)
    invoice = proforma_service.convert_proforma_to_invoice(proforma, current_user._get_current_object())
    return jsonify({
        'success': True,
        'proforma_invoice': proforma.to_dict(),
        'invoice': invoice.to_dict(get_local_date()),
    }), 201
