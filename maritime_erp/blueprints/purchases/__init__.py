from flask import Blueprint

purchases_bp = Blueprint('purchases', __name__)

# Import all routes
from . import (  # noqa: E402,F401
    purchase_requests,
    orders,
    invoices,
    payables
)

__all__ = ['purchases_bp']
