import os
import sys

# Add the app directory to Python path
sys.path.insert(0, os.path.dirname(__file__))

# Set production environment
os.environ['FLASK_ENV'] = 'production'

from maritime_erp import create_app  # noqa: E402
from config import ProductionConfig  # noqa: E402

# Create application instance
application = create_app(ProductionConfig)
application.logger.info("Maritime Services ERP - production server started")
