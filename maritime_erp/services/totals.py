"""
Line-item aggregation shared by every priced document.

Amounts are kept at full Decimal precision here; rounding to cents happens only
where a value is stored or rendered (utils.money.to_money).
"""
from collections import namedtuple

from ..errors import ValidationError
from ..utils.money import ZERO, to_decimal, to_money, format_money

HUNDRED = to_decimal('100')

DocumentTotals = namedtuple('DocumentTotals', ['subtotal', 'tax_amount', 'total_amount'])


def _number(item, field, index, default=ZERO):
    try:
        return to_decimal(item.get(field), default)
    except ValueError:
        raise ValidationError('Invalid line items', {f'items[{index}].{field}': ['Not a valid decimal value.']})


def line_amounts(item, index=0):
    """(net, tax) for one line item"""
    quantity = _number(item, 'quantity', index, default=None)
    unit_price = _number(item, 'unit_price', index, default=None)
    tax_rate = _number(item, 'tax_rate', index)

    if quantity is None or quantity <= 0:
        raise ValidationError('Invalid line items',
                              {f'items[{index}].quantity': ['Quantity must be greater than zero']})
    if unit_price is None or unit_price < 0:
        raise ValidationError('Invalid line items',
                              {f'items[{index}].unit_price': ['Unit price cannot be negative']})
    if tax_rate < 0:
        raise ValidationError('Invalid line items',
                              {f'items[{index}].tax_rate': ['Tax rate cannot be negative']})

    net = quantity * unit_price
    return net, net * tax_rate / HUNDRED


def compute_totals(items, discount=0):
    """
    subtotal = sum(quantity * unit_price)
    tax_amount = sum(quantity * unit_price * tax_rate / 100)
    total_amount = subtotal - discount + tax_amount

    A discount larger than subtotal + tax is rejected rather than clamped.
    """
    try:
        discount = to_decimal(discount)
    except ValueError:
        raise ValidationError('Invalid discount', {'discount': ['Not a valid decimal value.']})
    if discount < 0:
        raise ValidationError('Discount cannot be negative', {'discount': ['Discount cannot be negative']})

    subtotal = ZERO
    tax_amount = ZERO
    for index, item in enumerate(items):
        net, tax = line_amounts(item, index)
        subtotal += net
        tax_amount += tax

    if to_money(discount) > to_money(subtotal) + to_money(tax_amount):
        raise ValidationError('Discount cannot exceed the document total',
                              {'discount': ['Discount cannot exceed subtotal plus tax']})

    return DocumentTotals(subtotal, tax_amount, subtotal - discount + tax_amount)


def normalize_line_items(items):
    """Stored form of validated items: numbers as decimal strings plus computed tax and line total"""
    normalized = []
    for index, item in enumerate(items):
        net, tax = line_amounts(item, index)
        normalized.append({
            'description': item['description'],
            'quantity': str(to_decimal(item['quantity'])),
            'unit_price': str(to_decimal(item['unit_price'])),
            'tax_rate': str(to_decimal(item.get('tax_rate'))),
            'tax_amount': format_money(tax),
            'line_total': format_money(net + tax),
        })
    return normalized
