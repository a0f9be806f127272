import random
import string

from ..utils.timezone_helper import get_local_date


def generate_document_number(model, column, prefix):
    """Generate unique document number: PREFIX-YYYYMMDD-NNNNN"""
    date_str = get_local_date().strftime('%Y%m%d')
    random_str = ''.join(random.choices(string.digits, k=5))
    number = f'{prefix}-{date_str}-{random_str}'

    # Check if exists
    while model.query.filter(getattr(model, column) == number).first():
        random_str = ''.join(random.choices(string.digits, k=5))
        number = f'{prefix}-{date_str}-{random_str}'

    return number
