from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal('0.01')
ZERO = Decimal('0')


def to_decimal(value, default=ZERO):
    """Coerce form/JSON/DB values to Decimal without going through float"""
    if value is None or value == '':
        return default
    if isinstance(value, Decimal) and value.is_finite():
        return value
    if isinstance(value, float):
        value = repr(value)
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f'Not a valid decimal value: {value!r}')
    if not number.is_finite():
        raise ValueError(f'Not a valid decimal value: {value!r}')
    return number


def to_money(value):
    """Round to 2 places; only used where amounts are stored or displayed"""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value):
    if value is None:
        return None
    return str(to_money(value))
