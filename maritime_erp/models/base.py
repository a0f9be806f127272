from .. import db
from ..utils.money import format_money, to_money


def status_column(enum_cls, default, **kwargs):
    """Non-native Enum column storing the member's string value"""
    return db.Column(
        db.Enum(
            enum_cls,
            native_enum=False,
            length=20,
            validate_strings=True,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
        default=default,
        **kwargs
    )


class LineItemDocumentMixin:
    """Embedded line items and the totals computed from them"""
    items = db.Column(db.JSON, nullable=False, default=list)
    subtotal = db.Column(db.Numeric(12, 2), default=0)
    tax_amount = db.Column(db.Numeric(12, 2), default=0)
    discount = db.Column(db.Numeric(12, 2), default=0)
    total_amount = db.Column(db.Numeric(12, 2), default=0)

    EDITABLE_FIELDS = ()

    def form_data(self):
        """Current header values in the shape the validation forms expect"""
        return {field: getattr(self, field) for field in self.EDITABLE_FIELDS}

    def apply_totals(self, items, totals, discount):
        # assign a fresh list so the JSON column is flagged as changed
        self.items = list(items)
        self.discount = to_money(discount)
        self.subtotal = to_money(totals.subtotal)
        self.tax_amount = to_money(totals.tax_amount)
        # derived from the rounded parts so the stored figures always add up
        self.total_amount = self.subtotal - self.discount + self.tax_amount

    def totals_dict(self):
        return {
            'items': list(self.items or []),
            'subtotal': format_money(self.subtotal),
            'tax_amount': format_money(self.tax_amount),
            'discount': format_money(self.discount),
            'total_amount': format_money(self.total_amount),
        }


def isoformat(value):
    return value.isoformat() if value else None
