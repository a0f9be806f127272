# maritime_erp/utils/timezone_helper.py
"""
Company timezone helper functions
"""
from datetime import datetime
import pytz
from flask import current_app

DEFAULT_TIMEZONE = 'Asia/Dubai'


def get_company_timezone():
    """Timezone configured for the company (APP_TIMEZONE)"""
    try:
        name = current_app.config.get('APP_TIMEZONE', DEFAULT_TIMEZONE)
    except RuntimeError:
        # Outside an application context
        name = DEFAULT_TIMEZONE
    return pytz.timezone(name)


def get_local_time():
    """Get current time in the company timezone"""
    return datetime.now(get_company_timezone())


def get_local_date():
    """Get current date in the company timezone"""
    return get_local_time().date()


def utc_to_local(utc_dt):
    """Convert UTC datetime to company local time"""
    if utc_dt is None:
        return None

    if utc_dt.tzinfo is None:
        # Assume UTC if no timezone info
        utc_dt = pytz.utc.localize(utc_dt)

    return utc_dt.astimezone(get_company_timezone())


def format_local_time(dt, format_str='%Y-%m-%d %H:%M:%S'):
    if dt is None:
        return ''
    return utc_to_local(dt).strftime(format_str)
