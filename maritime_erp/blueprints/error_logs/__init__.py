from flask import Blueprint

error_logs_bp = Blueprint('error_logs', __name__)

from . import routes  # noqa: E402,F401
