from flask import Blueprint

master_data_bp = Blueprint('master_data', __name__)

# Import all routes
from . import (  # noqa: E402,F401
    customers,
    suppliers
)

__all__ = ['master_data_bp']
