#!/usr/bin/env python3
"""
Sample Data Initialization Script
Run this script to populate the database with sample data for development/testing.
Usage: python init_sample_data.py
"""

from maritime_erp import create_app, db
from maritime_erp.models import User, Customer, Supplier
from maritime_erp.services import master_data, projects, quotations, invoices, purchases


def init_sample_data():
    """Initialize sample data for development"""
    app = create_app()

    with app.app_context():
        try:
            print("Initializing sample data...")

            admin = User.query.filter_by(username='admin').first()
            if not admin:
                admin = User(
                    username='admin',
                    email='admin@maritime-erp.local',
                    role='admin',
                    is_active=True
                )
                admin.set_password('admin123')
                db.session.add(admin)
                db.session.commit()
                print("✓ Created default admin user: admin / admin123")

            # Create sample users for testing
            sample_users = [
                {'username': 'finance1', 'email': 'finance@maritime-erp.local', 'role': 'finance', 'password': 'finance123'},
                {'username': 'pm1', 'email': 'pm@maritime-erp.local', 'role': 'project_manager', 'password': 'pm123456'},
                {'username': 'staff1', 'email': 'staff1@maritime-erp.local', 'role': 'employee', 'password': 'staff123'},
            ]

            for user_data in sample_users:
                existing = User.query.filter_by(username=user_data['username']).first()
                if not existing:
                    user = User(
                        username=user_data['username'],
                        email=user_data['email'],
                        role=user_data['role'],
                        is_active=True
                    )
                    user.set_password(user_data['password'])
                    db.session.add(user)
                    print(f"✓ Created sample user: {user_data['username']} / {user_data['password']}")

            db.session.commit()

            if Customer.query.count() == 0:
                customer = master_data.create_customer({
                    'name': 'Gulf Shipping LLC',
                    'contact_person': 'Ahmed Rashid',
                    'phone': '+971501234567',
                    'email': 'ops@gulfshipping.example',
                    'address': 'Jebel Ali Free Zone, Dubai',
                    'vat_number': '100123456700003',
                    'vat_registration_status': 'registered',
                    'tax_category': 'free_zone',
                    'payment_terms': '30_days',
                }, admin)
                master_data.create_customer({
                    'name': 'Arabian Marine Services',
                    'phone': '+971507654321',
                    'email': 'accounts@arabianmarine.example',
                    'customer_type': 'business',
                }, admin)
                print("✓ Created sample customers")

                project = projects.create_project({
                    'title': 'Hull cleaning and inspection',
                    'vessel_name': 'MV Desert Star',
                    'vessel_imo_number': '9876543',
                    'customer_id': customer.id,
                    'location': 'Port Rashid',
                    'status': 'active',
                }, admin)

                quotation = quotations.create_quotation({
                    'customer_id': customer.id,
                    'items': [
                        {'description': 'Diver team (per day)', 'quantity': 2, 'unit_price': 4500, 'tax_rate': 5},
                        {'description': 'ROV hull survey', 'quantity': 1, 'unit_price': 7800, 'tax_rate': 5},
                    ],
                }, admin)
                quotations.approve_quotation(quotation, admin)
                invoice = quotations.convert_quotation_to_invoice(quotation, admin, project_id=project.id)
                invoices.approve_sales_invoice(invoice, admin)
                invoices.send_sales_invoice(invoice, admin)
                invoices.record_payment(invoice, {'amount': '5000.00', 'payment_method': 'bank_transfer',
                                                  'reference_number': 'TT-0001'}, admin)
                print("✓ Created sample quotation, invoice and payment")

            if Supplier.query.count() == 0:
                supplier = master_data.create_supplier({
                    'name': 'Emirates Marine Supplies',
                    'contact_person': 'Sara Khan',
                    'phone': '+97142223333',
                    'email': 'sales@emiratesmarine.example',
                    'tax_category': 'standard',
                }, admin)
                order = purchases.create_purchase_order({
                    'supplier_id': supplier.id,
                    'items': [{'description': 'Anti-fouling paint (20L)', 'quantity': 10,
                               'unit_price': 650, 'tax_rate': 5}],
                }, admin)
                print(f"✓ Created sample supplier and purchase order {order.po_number}")

            print("✓ Sample data initialization completed successfully!")

        except Exception as e:
            db.session.rollback()
            print(f"✗ Error during sample data initialization: {str(e)}")
            import traceback
            traceback.print_exc()


if __name__ == '__main__':
    init_sample_data()
