"""Pytest configuration and shared fixtures"""

import os
import sys
from datetime import date, timedelta
from decimal import Decimal

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from config import TestingConfig
from maritime_erp import create_app, db
from maritime_erp.models import User, Customer, Supplier
from maritime_erp.services import invoices, quotations


@pytest.fixture(scope="function")
def app(tmp_path):
    """
    Fresh application with an in-memory SQLite database for each test

    Yields:
        Flask app with an application context pushed
    """
    class Config(TestingConfig):
        UPLOAD_FOLDER = str(tmp_path / "uploads")

    app = create_app(Config)
    ctx = app.app_context()
    ctx.push()
    try:
        yield app
    finally:
        db.session.remove()
        db.drop_all()
        ctx.pop()


def _make_user(username, role, is_active=True):
    user = User(username=username, email=f"{username}@example.com", role=role, is_active=is_active)
    user.set_password("secret123")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def admin(app):
    return _make_user("admin", "admin")


@pytest.fixture
def finance(app):
    return _make_user("finance", "finance")


@pytest.fixture
def project_manager(app):
    return _make_user("pm", "project_manager")


@pytest.fixture
def employee(app):
    return _make_user("staff", "employee")


@pytest.fixture
def customer(app):
    customer = Customer(name="Gulf Shipping LLC", phone="+971500000001", email="ops@gulfshipping.example")
    db.session.add(customer)
    db.session.commit()
    return customer


@pytest.fixture
def supplier(app):
    supplier = Supplier(name="Emirates Marine Supplies", phone="+97142223333")
    db.session.add(supplier)
    db.session.commit()
    return supplier


@pytest.fixture
def sample_items():
    """One line: 2 x 100 at 5% VAT (subtotal 200, tax 10, total 210)"""
    return [{"description": "Diving inspection", "quantity": 2, "unit_price": 100, "tax_rate": 5}]


@pytest.fixture
def approved_invoice(admin, customer, sample_items):
    """Invoice for 210.00, approved and sent (status unpaid), due in 30 days"""
    invoice = invoices.create_sales_invoice({
        "customer_id": customer.id,
        "items": sample_items,
        "invoice_date": date.today(),
        "due_date": date.today() + timedelta(days=30),
    }, admin)
    invoices.approve_sales_invoice(invoice, admin)
    invoices.send_sales_invoice(invoice, admin)
    assert invoice.total_amount == Decimal("210.00")
    return invoice


@pytest.fixture
def draft_quotation(admin, customer, sample_items):
    return quotations.create_quotation({"customer_id": customer.id, "items": sample_items}, admin)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    """Log the test client in; returns the login response"""
    def _login(username, password="secret123"):
        return client.post("/api/auth/login", json={"username": username, "password": password})
    return _login


@pytest.fixture
def admin_client(client, admin, login):
    response = login("admin")
    assert response.status_code == 200
    return client
