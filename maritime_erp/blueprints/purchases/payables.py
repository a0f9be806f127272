from flask import jsonify, request
from flask_login import login_required

from ...services import purchases as purchase_service
from ...services.receivables import receivable_to_dict
from ...utils.pagination import get_bool_arg
from ...utils.permissions import permission_required
from . import purchases_bp


@purchases_bp.route('/payables')
@login_required
@permission_required('manage_purchases')
def payable_list():
    rows = purchase_service.list_payables(
        supplier_id=request.args.get('supplier_id', type=int),
        overdue_only=bool(get_bool_arg('overdue_only')),
    )
    return jsonify({'success': True, 'payables': [receivable_to_dict(row) for row in rows]})
