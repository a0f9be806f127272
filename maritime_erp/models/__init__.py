# maritime_erp/models/__init__.py

from .user import User
from .customer import Customer
from .supplier import Supplier
from .project import Project
from .sales import (
    SalesQuotation, SalesInvoice, InvoicePayment, PaymentFile, ProformaInvoice, CreditNote,
)
from .purchase import PurchaseRequest, PurchaseOrder, PurchaseInvoice, PurchaseInvoicePayment
from .ledger import GeneralLedgerEntry
from .error_log import ErrorLog
from .status import (
    QuotationStatus, InvoiceStatus, ProformaStatus, CreditNoteStatus,
    PurchaseRequestStatus, PurchaseOrderStatus, PurchaseInvoiceStatus, ApprovalStatus,
)

# Export all models
__all__ = [
    'User',
    'Customer',
    'Supplier',
    'Project',
    'SalesQuotation',
    'SalesInvoice',
    'InvoicePayment',
    'PaymentFile',
    'ProformaInvoice',
    'CreditNote',
    'PurchaseRequest',
    'PurchaseOrder',
    'PurchaseInvoice',
    'PurchaseInvoicePayment',
    'GeneralLedgerEntry',
    'ErrorLog',
    'QuotationStatus',
    'InvoiceStatus',
    'ProformaStatus',
    'CreditNoteStatus',
    'PurchaseRequestStatus',
    'PurchaseOrderStatus',
    'PurchaseInvoiceStatus',
    'ApprovalStatus',
]
