"""
Document events. Receivers run synchronously inside the sender's transaction,
so anything they add to the session is committed (or rolled back) with it.
"""
from blinker import Namespace

_signals = Namespace()

# sender: SalesInvoice
invoice_approved = _signals.signal('invoice-approved')
# sender: InvoicePayment
payment_recorded = _signals.signal('payment-recorded')
# sender: PurchaseInvoice
purchase_invoice_approved = _signals.signal('purchase-invoice-approved')
# sender: PurchaseInvoicePayment
purchase_payment_recorded = _signals.signal('purchase-payment-recorded')
