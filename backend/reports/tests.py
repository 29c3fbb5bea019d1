"""
Tests for the dashboard report
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.shipments.status import DELIVERED, IN_TRANSIT, RECEIVED


class DashboardTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user(role='employee')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_dashboard_figures(self):
        TestDataFactory.create_shipment(self.user)
        TestDataFactory.create_shipment(self.user, status=IN_TRANSIT, shipping_fee=Decimal('200.00'),
                                        shipping_fee_currency='TRY')
        TestDataFactory.create_shipment(self.user, status=DELIVERED, shipping_fee=Decimal('99.00'))
        TestDataFactory.create_trip(self.user)
        TestDataFactory.create_branch_entry(self.user)
        TestDataFactory.create_transaction(self.user, 'income', Decimal('30.00'))
        TestDataFactory.create_transaction(self.user, 'expense', Decimal('12.00'))
        TestDataFactory.create_transaction(self.user, 'debt', Decimal('50.00'))
        TestDataFactory.create_transaction(self.user, 'payment', Decimal('20.00'))

        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data
        self.assertEqual(data['shipments_total'], 3)
        self.assertEqual(data['shipments_today'], 3)
        self.assertEqual(data['collectible_totals'], {'TRY': '200.00', 'USD': '10.00'})
        received = [row for row in data['shipments_by_status'] if row['status'] == RECEIVED][0]
        self.assertEqual(received['count'], 1)
        self.assertEqual(sum(row['count'] for row in data['trips_by_status']), 1)
        self.assertEqual(data['pending_branch_entries'], 1)
        self.assertEqual(data['today_journal_net'], {'USD': '30.00'})
        self.assertEqual(data['today_cash_net'], {'USD': '18.00'})
        self.assertEqual(len(data['recent_shipments']), 3)

    def test_empty_dashboard(self):
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.data['shipments_total'], 0)
        self.assertEqual(response.data['collectible_totals'], {})
        self.assertEqual(response['Cache-Control'], 'private, max-age=60')

    def test_customer_is_forbidden(self):
        customer = TestDataFactory.create_user(role='customer')
        self.client.authenticate_user(customer)
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
