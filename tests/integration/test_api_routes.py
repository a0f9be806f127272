"""Integration tests for API routes"""

import io

import pytest

from maritime_erp import db
from maritime_erp.models import ErrorLog, InvoicePayment, InvoiceStatus, PaymentFile, SalesQuotation
from maritime_erp.services import invoices


@pytest.mark.integration
class TestAuthRoutes:
    """Test login and session handling"""

    def test_health_endpoint(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.get_json()["status"] == "healthy"

    def test_login_success(self, admin, login):
        response = login("admin")

        assert response.status_code == 200
        data = response.get_json()
        assert data["success"] is True
        assert data["user"]["role"] == "admin"

    def test_login_wrong_password(self, admin, login):
        response = login("admin", "wrong")

        assert response.status_code == 401
        assert response.get_json()["success"] is False

    def test_login_missing_fields(self, client):
        response = client.post("/api/auth/login", json={"username": "admin"})

        assert response.status_code == 400
        assert "password" in response.get_json()["errors"]

    def test_protected_route_requires_login(self, client):
        response = client.get("/api/customers")

        assert response.status_code == 401

    def test_me_and_logout(self, admin_client):
        assert admin_client.get("/api/auth/me").get_json()["user"]["username"] == "admin"

        assert admin_client.post("/api/auth/logout").status_code == 200
        assert admin_client.get("/api/auth/me").status_code == 401

    def test_register_admin_only(self, client, employee, login):
        login("staff")
        response = client.post("/api/auth/register", json={
            "username": "newuser", "email": "new@example.com", "password": "secret123", "role": "finance",
        })

        assert response.status_code == 403


@pytest.mark.integration
class TestMasterDataRoutes:
    """Test customer endpoints"""

    def test_create_list_archive_customer(self, admin_client):
        response = admin_client.post("/api/customers", json={"name": "Oceanic Tankers", "phone": "+97155000111"})
        assert response.status_code == 201
        customer_id = response.get_json()["customer"]["id"]

        listing = admin_client.get("/api/customers").get_json()
        assert listing["total"] == 1
        assert listing["items"][0]["name"] == "Oceanic Tankers"

        for _ in range(2):
            response = admin_client.post(f"/api/customers/{customer_id}/archive")
            assert response.status_code == 200
            assert response.get_json()["customer"]["is_archived"] is True

        assert admin_client.get("/api/customers").get_json()["total"] == 0
        assert admin_client.get("/api/customers?show_archived=true").get_json()["total"] == 1

    def test_validation_error_shape(self, admin_client):
        response = admin_client.post("/api/customers", json={"phone": "123"})

        assert response.status_code == 400
        data = response.get_json()
        assert data["success"] is False
        assert "name" in data["errors"]

    def test_unknown_customer_404(self, admin_client):
        response = admin_client.get("/api/customers/9999")

        assert response.status_code == 404
        assert response.get_json()["success"] is False

    def test_employee_cannot_create(self, client, employee, login):
        login("staff")
        response = client.post("/api/customers", json={"name": "X", "phone": "1"})

        assert response.status_code == 403


@pytest.mark.integration
class TestSalesRoutes:
    """Test the quotation to payment flow over HTTP"""

    def test_quotation_to_paid_invoice(self, admin_client, customer, sample_items):
        response = admin_client.post("/api/sales-quotations", json={"customer_id": customer.id, "items": sample_items})
        assert response.status_code == 201
        quotation = response.get_json()["quotation"]
        assert quotation["total_amount"] == "210.00"

        assert admin_client.post(f"/api/sales-quotations/{quotation['id']}/approve").status_code == 200

        response = admin_client.post(f"/api/sales-quotations/{quotation['id']}/convert", json={})
        assert response.status_code == 201
        invoice = response.get_json()["invoice"]
        assert invoice["status"] == "draft"
        assert invoice["customer_id"] == customer.id

        response = admin_client.post(f"/api/sales-invoices/{invoice['id']}/approve")
        assert response.get_json()["invoice"]["invoice_number"].startswith("INV-")

        response = admin_client.post(f"/api/sales-invoices/{invoice['id']}/payments", json={"amount": "100.00"})
        assert response.status_code == 201
        data = response.get_json()
        assert data["invoice"]["paid_amount"] == "100.00"
        assert data["invoice"]["status"] == "partially_paid"
        assert data["invoice"]["outstanding_amount"] == "110.00"

        response = admin_client.post(f"/api/sales-invoices/{invoice['id']}/payments", json={"amount": "110.00"})
        assert response.get_json()["invoice"]["status"] == "paid"

        response = admin_client.post(f"/api/sales-invoices/{invoice['id']}/payments", json={"amount": "1"})
        assert response.status_code == 409

    def test_invalid_transition_is_409(self, admin_client, draft_quotation):
        response = admin_client.post(f"/api/sales-quotations/{draft_quotation.id}/convert", json={})

        assert response.status_code == 409
        assert response.get_json()["success"] is False

    def test_overpayment_is_409(self, admin_client, approved_invoice):
        response = admin_client.post(f"/api/sales-invoices/{approved_invoice.id}/payments", json={"amount": "500"})

        assert response.status_code == 409
        assert "amount" in response.get_json()["errors"]

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "sNaN"])
    def test_non_finite_quantity_is_400(self, admin_client, customer, value):
        response = admin_client.post("/api/sales-quotations", json={
            "customer_id": customer.id,
            "items": [{"description": "Towage", "quantity": value, "unit_price": "100"}],
        })

        assert response.status_code == 400
        assert "items[0].quantity" in response.get_json()["errors"]
        assert SalesQuotation.query.count() == 0

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "sNaN"])
    def test_non_finite_payment_is_400(self, admin_client, approved_invoice, value):
        response = admin_client.post(f"/api/sales-invoices/{approved_invoice.id}/payments", json={"amount": value})

        assert response.status_code == 400
        assert "amount" in response.get_json()["errors"]
        assert InvoicePayment.query.count() == 0

    def test_finance_cannot_approve_invoice(self, client, finance, login, customer, sample_items):
        invoice = invoices.create_sales_invoice({"customer_id": customer.id, "items": sample_items}, finance)
        login("finance")

        response = client.post(f"/api/sales-invoices/{invoice.id}/approve")

        assert response.status_code == 403
        assert invoice.status == InvoiceStatus.DRAFT

    def test_payment_with_attachment(self, admin_client, approved_invoice):
        response = admin_client.post(
            f"/api/sales-invoices/{approved_invoice.id}/payments",
            data={
                "amount": "50",
                "payment_method": "bank_transfer",
                "files": (io.BytesIO(b"%PDF-1.4 remittance"), "remittance.pdf"),
            },
            content_type="multipart/form-data",
        )

        assert response.status_code == 201
        files = response.get_json()["payment"]["files"]
        assert len(files) == 1
        assert files[0]["original_name"] == "remittance.pdf"

        download = admin_client.get(f"/api/payment-files/{files[0]['id']}/download")
        assert download.status_code == 200
        assert download.data == b"%PDF-1.4 remittance"
        download.close()

    def test_attachment_type_rejected(self, admin_client, approved_invoice):
        response = admin_client.post(
            f"/api/sales-invoices/{approved_invoice.id}/payments",
            data={"amount": "50", "files": (io.BytesIO(b"MZ"), "virus.exe")},
            content_type="multipart/form-data",
        )

        assert response.status_code == 400
        assert db.session.query(PaymentFile).count() == 0

    def test_receivables_endpoint(self, admin_client, approved_invoice):
        data = admin_client.get("/api/receivables").get_json()

        assert data["success"] is True
        assert data["receivables"][0]["outstanding_amount"] == "210.00"


@pytest.mark.integration
class TestErrorLogRoutes:
    """Test client error reporting"""

    def test_anonymous_report(self, client):
        response = client.post("/api/error-logs", json={"message": "Unhandled promise rejection"})

        assert response.status_code == 201
        assert ErrorLog.query.count() == 1

    def test_listing_requires_admin(self, client, finance, login):
        login("finance")

        assert client.get("/api/error-logs").status_code == 403

    def test_admin_can_clear(self, admin_client):
        admin_client.post("/api/error-logs", json={"message": "one"})
        response = admin_client.delete("/api/error-logs")

        assert response.get_json()["deleted"] == 1
