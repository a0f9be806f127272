import os
from datetime import timedelta

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'change-this-secret-key'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///' + os.path.join(BASE_DIR, 'maritime_erp.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SESSION_COOKIE_SECURE = False  # Set to True in production with HTTPS
    REMEMBER_COOKIE_DURATION = timedelta(days=7)
    DEBUG = False
    TESTING = False

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FILE = os.environ.get('LOG_FILE')

    # Company / finance settings
    APP_TIMEZONE = os.environ.get('APP_TIMEZONE', 'Asia/Dubai')
    DEFAULT_CURRENCY = 'AED'
    DEFAULT_PAYMENT_TERMS_DAYS = 30
    # Payments above the outstanding balance are rejected unless enabled
    ALLOW_OVERPAYMENT = False

    # Listings
    ITEMS_PER_PAGE = 10
    MAX_ITEMS_PER_PAGE = 100

    # File Upload Settings
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or os.path.join(BASE_DIR, 'uploads')
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB max file size
    ALLOWED_ATTACHMENT_EXTENSIONS = {'pdf', 'png', 'jpg', 'jpeg', 'doc', 'docx', 'xls', 'xlsx'}


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    WTF_CSRF_ENABLED = False
    LOG_LEVEL = 'WARNING'
    SEED_ADMIN = False


class ProductionConfig(Config):
    SESSION_COOKIE_SECURE = True


config_by_name = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
}


def get_config():
    """Pick the config class from FLASK_ENV (defaults to development)"""
    env = os.environ.get('FLASK_ENV', 'development').lower()
    return config_by_name.get(env, DevelopmentConfig)


def ensure_directories(config_class=None):
    """Create upload folders used by payment attachments"""
    config_class = config_class or get_config()
    payments_dir = os.path.join(config_class.UPLOAD_FOLDER, 'payments')
    os.makedirs(payments_dir, exist_ok=True)


def print_config_summary():
    config_class = get_config()
    print("=" * 50)
    print(f"Environment : {os.environ.get('FLASK_ENV', 'development')}")
    print(f"Database    : {config_class.SQLALCHEMY_DATABASE_URI}")
    print(f"Uploads     : {config_class.UPLOAD_FOLDER}")
    print(f"Timezone    : {config_class.APP_TIMEZONE}")
    print(f"Currency    : {config_class.DEFAULT_CURRENCY}")
    print(f"Debug       : {config_class.DEBUG}")
    print("=" * 50)
