from .. import db

from .customer import PartyMixin

SUPPLIER_TAX_CATEGORIES = ('standard', 'import', 'gcc_supplier', 'free_zone')


class Supplier(PartyMixin, db.Model):
    __tablename__ = 'suppliers'

    phone = db.Column(db.String(20))
    supplier_type = db.Column(db.String(20), nullable=False, default='business')
    bank_info = db.Column(db.Text)

    EDITABLE_FIELDS = PartyMixin.EDITABLE_FIELDS + ('supplier_type', 'bank_info')

    # Relationships
    purchase_orders = db.relationship('PurchaseOrder', back_populates='supplier', lazy=True)
    purchase_invoices = db.relationship('PurchaseInvoice', back_populates='supplier', lazy=True)

    def to_dict(self):
        data = self._party_dict()
        data['supplier_type'] = self.supplier_type
        data['bank_info'] = self.bank_info
        return data

    def __repr__(self):
        return f'<Supplier {self.name}>'
