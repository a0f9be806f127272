"""
Lifecycle states for every document type.

Each state set is an Enum whose values are the strings stored in the database.
Allowed moves live in a transition table that must name every member, so a new
state cannot be added without deciding where it may go.
"""
from enum import Enum

from ..errors import InvalidTransitionError


class QuotationStatus(str, Enum):
    DRAFT = 'draft'
    SENT = 'sent'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    CONVERTED = 'converted'


class InvoiceStatus(str, Enum):
    DRAFT = 'draft'
    APPROVED = 'approved'
    UNPAID = 'unpaid'
    PARTIALLY_PAID = 'partially_paid'
    PAID = 'paid'
    OVERDUE = 'overdue'


class ProformaStatus(str, Enum):
    DRAFT = 'draft'
    SENT = 'sent'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    EXPIRED = 'expired'
    CONVERTED = 'converted'


class CreditNoteStatus(str, Enum):
    DRAFT = 'draft'
    ISSUED = 'issued'
    APPLIED = 'applied'
    CANCELLED = 'cancelled'


class PurchaseRequestStatus(str, Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    COMPLETED = 'completed'


class PurchaseOrderStatus(str, Enum):
    DRAFT = 'draft'
    SENT = 'sent'
    CONFIRMED = 'confirmed'
    RECEIVED = 'received'
    CANCELLED = 'cancelled'


class PurchaseInvoiceStatus(str, Enum):
    PENDING = 'pending'
    PARTIALLY_PAID = 'partially_paid'
    PAID = 'paid'
    OVERDUE = 'overdue'


class ApprovalStatus(str, Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'


_Q = QuotationStatus
_I = InvoiceStatus
_P = ProformaStatus
_C = CreditNoteStatus
_R = PurchaseRequestStatus
_O = PurchaseOrderStatus
_PI = PurchaseInvoiceStatus
_A = ApprovalStatus

TRANSITIONS = {
    # Approval is only granted from draft; a sent quotation can still be
    # rejected but must not be approved or converted.
    QuotationStatus: {
        _Q.DRAFT: {_Q.SENT, _Q.APPROVED, _Q.REJECTED},
        _Q.SENT: {_Q.REJECTED},
        _Q.APPROVED: {_Q.CONVERTED},
        _Q.REJECTED: set(),
        _Q.CONVERTED: set(),
    },
    # Payment-driven moves (to partially_paid/paid/overdue) go through
    # refresh_invoice_status, which checks the same table.
    InvoiceStatus: {
        _I.DRAFT: {_I.APPROVED},
        _I.APPROVED: {_I.UNPAID, _I.PARTIALLY_PAID, _I.PAID, _I.OVERDUE},
        _I.UNPAID: {_I.PARTIALLY_PAID, _I.PAID, _I.OVERDUE},
        _I.PARTIALLY_PAID: {_I.PAID, _I.OVERDUE},
        _I.OVERDUE: {_I.PARTIALLY_PAID, _I.PAID},
        _I.PAID: set(),
    },
    ProformaStatus: {
        _P.DRAFT: {_P.SENT, _P.APPROVED, _P.REJECTED, _P.EXPIRED},
        _P.SENT: {_P.APPROVED, _P.REJECTED, _P.EXPIRED},
        _P.APPROVED: {_P.CONVERTED, _P.EXPIRED},
        _P.REJECTED: set(),
        _P.EXPIRED: set(),
        _P.CONVERTED: set(),
    },
    CreditNoteStatus: {
        _C.DRAFT: {_C.ISSUED, _C.CANCELLED},
        _C.ISSUED: {_C.APPLIED, _C.CANCELLED},
        _C.APPLIED: set(),
        _C.CANCELLED: set(),
    },
    PurchaseRequestStatus: {
        _R.PENDING: {_R.APPROVED, _R.REJECTED},
        _R.APPROVED: {_R.COMPLETED},
        _R.REJECTED: set(),
        _R.COMPLETED: set(),
    },
    PurchaseOrderStatus: {
        _O.DRAFT: {_O.SENT, _O.CANCELLED},
        _O.SENT: {_O.CONFIRMED, _O.CANCELLED},
        _O.CONFIRMED: {_O.RECEIVED, _O.CANCELLED},
        _O.RECEIVED: set(),
        _O.CANCELLED: set(),
    },
    PurchaseInvoiceStatus: {
        _PI.PENDING: {_PI.PARTIALLY_PAID, _PI.PAID, _PI.OVERDUE},
        _PI.PARTIALLY_PAID: {_PI.PAID, _PI.OVERDUE},
        _PI.OVERDUE: {_PI.PARTIALLY_PAID, _PI.PAID},
        _PI.PAID: set(),
    },
    ApprovalStatus: {
        _A.PENDING: {_A.APPROVED, _A.REJECTED},
        _A.APPROVED: set(),
        _A.REJECTED: set(),
    },
}

for _enum, _table in TRANSITIONS.items():
    _missing = set(_enum) - set(_table)
    if _missing:
        raise RuntimeError(f'{_enum.__name__} transition table is missing {sorted(m.value for m in _missing)}')


def can_transition(current, target):
    enum_cls = type(target)
    return target in TRANSITIONS[enum_cls][enum_cls(current)]


def ensure_transition(current, target):
    """Raise InvalidTransitionError unless current -> target is allowed"""
    if not can_transition(current, target):
        raise InvalidTransitionError(current, target)
