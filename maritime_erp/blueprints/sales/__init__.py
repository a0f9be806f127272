from flask import Blueprint

sales_bp = Blueprint('sales', __name__)

# Import all routes
from . import (  # noqa: E402,F401
    quotations,
    invoices,
    proforma,
    credit_notes,
    receivables
)

__all__ = ['sales_bp']
