from flask import jsonify, request, send_file
from flask_login import login_required, current_user

from ...services import attachments
from ...services import invoices as invoice_service
from ...utils.pagination import get_page_args, get_date_arg, paginated_response, get_json_payload
from ...utils.permissions import permission_required
from ...utils.timezone_helper import get_local_date
from . import sales_bp


@sales_bp.route('/sales-invoices')
@login_required
@permission_required('view_sales')
def invoice_list():
    page, per_page = get_page_args()
    today = get_local_date()
    pagination = invoice_service.list_sales_invoices(
        search=request.args.get('search'),
        status=request.args.get('status'),
        customer_id=request.args.get('customer_id', type=int),
        project_id=request.args.get('project_id', type=int),
        date_from=get_date_arg('date_from'),
        date_to=get_date_arg('date_to'),
        today=today,
        page=page,
        per_page=per_page,
    )
    return jsonify(paginated_response(pagination, lambda invoice: invoice.to_dict(today)))


@sales_bp.route('/sales-invoices', methods=['POST'])
@login_required
@permission_required('manage_sales')
def invoice_create():
    invoice = invoice_service.create_sales_invoice(get_json_payload(), current_user._get_current_object())
    return jsonify({'success': True, 'invoice': invoice.to_dict(get_local_date())}), 201


@sales_bp.route('/sales-invoices/<int:invoice_id>')
@login_required
@permission_required('view_sales')
def invoice_detail(invoice_id):
    invoice = invoice_service.get_sales_invoice(invoice_id)
    data = invoice.to_dict(get_local_date())
    data['payments'] = [payment.to_dict() for payment in invoice.payments]
    return jsonify({'success': True, 'invoice': data})


@sales_bp.route('/sales-invoices/<int:invoice_id>', methods=['PUT'])
@login_required
@permission_required('manage_sales')
def invoice_update(invoice_id):
    invoice = invoice_service.get_sales_invoice(invoice_id)
    invoice_service.update_sales_invoice(invoice, get_json_payload(), current_user._get_current_object())
    return jsonify({'success': True, 'invoice': invoice.to_dict(get_local_date())})


@sales_bp.route('/sales-invoices/<int:invoice_id>/approve', methods=['POST'])
@login_required
@permission_required('approve_sales')
def invoice_approve(invoice_id):
    invoice = invoice_service.get_sales_invoice(invoice_id)
    invoice_service.approve_sales_invoice(invoice, current_user._get_current_object())
    return jsonify({'success': True, 'invoice': invoice.to_dict(get_local_date())})


@sales_bp.route('/sales-invoices/<int:invoice_id>/send', methods=['POST'])
@login_required
@permission_required('manage_sales')
def invoice_send(invoice_id):
    invoice = invoice_service.get_sales_invoice(invoice_id)
    invoice_service.send_sales_invoice(invoice, current_user._get_current_object())
    return jsonify({'success': True, 'invoice': invoice.to_dict(get_local_date())})


@sales_bp.route('/sales-invoices/<int:invoice_id>/payments')
@login_required
@permission_required('view_sales')
def invoice_payments(invoice_id):
    invoice = invoice_service.get_sales_invoice(invoice_id)
    return jsonify({
        'success': True,
        'payments': [payment.to_dict() for payment in invoice.payments],
    })


@sales_bp.route('/sales-invoices/<int:invoice_id>/payments', methods=['POST'])
@login_required
@permission_required('record_payments')
def invoice_add_payment(invoice_id):
    """JSON body, or multipart form fields with attachments under 'files'"""
    invoice = invoice_service.get_sales_invoice(invoice_id)
    payment = invoice_service.record_payment(
        invoice,
        get_json_payload(),
        current_user._get_current_object(),
        files=[f for f in request.files.getlist('files') if f.filename],
    )
    return jsonify({
        'success': True,
        'payment': payment.to_dict(),
        'invoice': payment.invoice.to_dict(get_local_date()),
    }), 201


@sales_bp.route('/sales-invoices/<int:invoice_id>/payment-files')
@login_required
@permission_required('view_sales')
def invoice_payment_files(invoice_id):
    invoice = invoice_service.get_sales_invoice(invoice_id)
    return jsonify({
        'success': True,
        'files': [f.to_dict() for f in attachments.list_invoice_files(invoice)],
    })


@sales_bp.route('/payment-files/<int:file_id>/download')
@login_required
@permission_required('view_sales')
def payment_file_download(file_id):
    payment_file = attachments.get_payment_file(file_id)
    return send_file(
        payment_file.file_path,
        mimetype=payment_file.mime_type,
        as_attachment=True,
        download_name=payment_file.original_name,
    )


@sales_bp.route('/payment-files/<int:file_id>', methods=['DELETE'])
@login_required
@permission_required('record_payments')
def payment_file_delete(file_id):
    payment_file = attachments.get_payment_file(file_id)
    attachments.delete_payment_file(payment_file, current_user._get_current_object())
    return jsonify({'success': True})
