from flask import jsonify, request
from flask_login import login_required

from ...services import receivables as receivable_service
from ...utils.money import format_money
from ...utils.pagination import get_bool_arg
from ...utils.permissions import permission_required
from . import sales_bp


@sales_bp.route('/receivables')
@login_required
@permission_required('view_sales')
def receivable_list():
    rows = receivable_service.list_receivables(
        customer_id=request.args.get('customer_id', type=int),
        overdue_only=bool(get_bool_arg('overdue_only')),
    )
    return jsonify({
        'success': True,
        'receivables': [receivable_service.receivable_to_dict(row) for row in rows],
    })


@sales_bp.route('/receivables/summary')
@login_required
@permission_required('view_sales')
def receivable_summary():
    summary = receivable_service.receivables_summary()
    summary['total_outstanding'] = format_money(summary['total_outstanding'])
    summary['overdue_outstanding'] = format_money(summary['overdue_outstanding'])
    return jsonify({'success': True, 'summary': summary})
