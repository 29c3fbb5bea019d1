"""
Tests for customers: CRUD, extraction from shipments and account summary
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.parties.models import Customer
from backend.parties.utils import collect_shipment_parties, sync_customers_from_shipments
from backend.shipments.models import Shipment


class ShipmentPartiesTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()

    def test_party_seen_in_both_roles_is_both(self):
        TestDataFactory.create_shipment(self.user, sender_name='Ali', sender_phone='0911',
                                        recipient_name='Huda', recipient_phone='0922')
        TestDataFactory.create_shipment(self.user, sender_name='Huda', sender_phone='0922',
                                        recipient_name='Sami', recipient_phone='0933')
        parties = collect_shipment_parties(Shipment.objects.all())
        self.assertEqual(parties[('Ali', '0911')], 'sender')
        self.assertEqual(parties[('Huda', '0922')], 'both')
        self.assertEqual(parties[('Sami', '0933')], 'receiver')

    def test_rows_without_phone_are_ignored(self):
        TestDataFactory.create_shipment(self.user, sender_name='NoPhone', sender_phone='',
                                        recipient_name='Rami', recipient_phone='0944')
        parties = collect_shipment_parties(Shipment.objects.all())
        self.assertEqual(list(parties), [('Rami', '0944')])

    def test_sync_skips_existing_customers(self):
        TestDataFactory.create_customer(name='Ali', phone='0911')
        TestDataFactory.create_shipment(self.user, sender_name='Ali', sender_phone='0911',
                                        recipient_name='Huda', recipient_phone='0922')
        created = sync_customers_from_shipments(Shipment.objects.all())
        self.assertEqual([c.name for c in created], ['Huda'])
        self.assertTrue(created[0].extracted_from_shipments)

        self.assertEqual(sync_customers_from_shipments(Shipment.objects.all()), [])


class CustomerAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user(role='employee')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_customer(self):
        response = self.client.post('/api/v1/customers/', {
            'name': 'Nour', 'phone': '0955555555', 'customer_type': 'sender'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['extracted_from_shipments'])

    def test_type_filter_includes_both(self):
        TestDataFactory.create_customer(name='S', customer_type='sender')
        TestDataFactory.create_customer(name='R', customer_type='receiver')
        TestDataFactory.create_customer(name='B', customer_type='both')
        response = self.client.get('/api/v1/customers/', {'type': 'sender'})
        self.assertEqual(sorted(c['name'] for c in response.data), ['B', 'S'])

    def test_sync_endpoint(self):
        TestDataFactory.create_shipment(self.user, sender_name='Ali', sender_phone='0911',
                                        recipient_name='Huda', recipient_phone='0922')
        response = self.client.post('/api/v1/customers/sync-from-shipments/')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created'], 2)

        response = self.client.post('/api/v1/customers/sync-from-shipments/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['created'], 0)

    def test_summary_balance_per_currency(self):
        customer = TestDataFactory.create_customer(phone='0966666666')
        TestDataFactory.create_shipment(self.user, sender_phone='0966666666')
        TestDataFactory.create_transaction(self.user, 'debt', Decimal('100.00'), 'USD', customer=customer)
        TestDataFactory.create_transaction(self.user, 'payment', Decimal('40.00'), 'USD', customer=customer)
        TestDataFactory.create_transaction(self.user, 'debt', Decimal('500.00'), 'TRY', customer=customer)

        response = self.client.get(f'/api/v1/customers/{customer.pk}/summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_shipments'], 1)
        self.assertEqual(response.data['balance'], {'TRY': '500.00', 'USD': '60.00'})

    def test_customer_role_is_denied(self):
        customer_user = TestDataFactory.create_user(role='customer')
        self.client.authenticate_user(customer_user)
        response = self.client.get('/api/v1/customers/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Customer.objects.exists())
