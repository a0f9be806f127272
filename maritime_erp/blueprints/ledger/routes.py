from flask import jsonify, request
from flask_login import login_required, current_user

from ...services import ledger as ledger_service
from ...utils.pagination import get_page_args, get_date_arg, paginated_response, get_json_payload
from ...utils.permissions import permission_required
from . import ledger_bp


@ledger_bp.route('')
@login_required
@permission_required('manage_ledger')
def ledger_entry_list():
    page, per_page = get_page_args()
    pagination = ledger_service.list_ledger_entries(
        account_name=request.args.get('account_name'),
        entry_type=request.args.get('entry_type'),
        reference_type=request.args.get('reference_type'),
        project_id=request.args.get('project_id', type=int),
        date_from=get_date_arg('date_from'),
        date_to=get_date_arg('date_to'),
        page=page,
        per_page=per_page,
    )
    return jsonify(paginated_response(pagination))


@ledger_bp.route('/journal-entries', methods=['POST'])
@login_required
@permission_required('manage_ledger')
def journal_entry_create():
    entries = ledger_service.create_journal_entry(get_json_payload(), current_user._get_current_object())
    return jsonify({'success': True, 'entries': [entry.to_dict() for entry in entries]}), 201


@ledger_bp.route('/balances')
@login_required
@permission_required('manage_ledger')
def account_balance_list():
    return jsonify({'success': True, 'balances': ledger_service.account_balances()})
