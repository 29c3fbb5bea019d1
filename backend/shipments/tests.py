"""
Tests for shipments: numbering, status history, collectibles, tracking and exports
"""
import io
from decimal import Decimal

import openpyxl
from django.test import TestCase
from rest_framework import status

from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.shipments.models import Shipment, ShipmentStatusUpdate
from backend.shipments.services import apply_status
from backend.shipments.status import (
    DELIVERED, IN_TRANSIT, PENDING, RECEIVED, normalize_shipment_status, normalize_trip_status
)


class StatusVocabularyTests(TestCase):
    def test_codes_labels_and_aliases(self):
        self.assertEqual(normalize_shipment_status('delivered'), DELIVERED)
        self.assertEqual(normalize_shipment_status('قيد النقل'), IN_TRANSIT)
        self.assertEqual(normalize_shipment_status('In Transit'), IN_TRANSIT)
        self.assertEqual(normalize_shipment_status('in-transit'), IN_TRANSIT)
        self.assertIsNone(normalize_shipment_status('lost'))

    def test_trip_statuses_are_narrower(self):
        self.assertEqual(normalize_trip_status('قيد الانتظار'), PENDING)
        self.assertIsNone(normalize_trip_status('arrived'))


class ShipmentModelTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()

    def test_number_is_generated(self):
        shipment = TestDataFactory.create_shipment(self.user)
        self.assertTrue(shipment.shipment_number.startswith('SHP-'))
        self.assertEqual(len(shipment.shipment_number), 12)

    def test_collectible_totals_per_currency(self):
        shipment = TestDataFactory.create_shipment(
            self.user,
            goods_value=Decimal('100.00'), goods_currency='USD',
            shipping_fee=Decimal('15.00'), shipping_fee_currency='USD',
            hwala_fee=Decimal('200.00'), hwala_fee_currency='TRY', hwala_fee_payment_method='collect',
            custom_fee1_name='Packing', custom_fee1_amount=Decimal('5.00'), custom_fee1_currency='TRY',
            custom_fee2_amount=Decimal('99.00'),
        )
        self.assertEqual(shipment.collectible_totals(), {'USD': Decimal('115.00'), 'TRY': Decimal('205.00')})

    def test_prepaid_fee_is_not_collected(self):
        shipment = TestDataFactory.create_shipment(self.user, shipping_fee_payment_method='prepaid')
        self.assertEqual(shipment.collectible_totals(), {})
        self.assertIsNone(shipment.collected_shipping_fee())

    def test_apply_status_records_only_changes(self):
        shipment = TestDataFactory.create_shipment(self.user)
        self.assertTrue(apply_status(shipment, IN_TRANSIT, user=self.user))
        self.assertFalse(apply_status(shipment, IN_TRANSIT, user=self.user))
        self.assertEqual(ShipmentStatusUpdate.objects.filter(shipment=shipment).count(), 1)


class ShipmentAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user(role='employee')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_shipment(self):
        response = self.client.post('/api/v1/shipments/', {
            'recipient_name': 'Lina',
            'recipient_phone': '0977777777',
            'sender_name': 'Omar',
            'governorate': 'Latakia',
            'goods_value': '50.00',
            'shipping_fee': '10.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], RECEIVED)
        self.assertEqual(response.data['collectible_totals'], {'USD': '60.00'})
        shipment = Shipment.objects.get(pk=response.data['id'])
        self.assertEqual(shipment.created_by, self.user)
        self.assertEqual(shipment.status_updates.count(), 1)
        self.assertTrue(AuditLog.objects.filter(action='shipment_create', object_id=str(shipment.pk)).exists())

    def test_negative_amount_rejected(self):
        response = self.client.post('/api/v1/shipments/', {
            'recipient_name': 'Lina',
            'shipping_fee': '-1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('shipping_fee', response.data)

    def test_change_status_accepts_label(self):
        shipment = TestDataFactory.create_shipment(self.user)
        response = self.client.post(f'/api/v1/shipments/{shipment.pk}/status/', {
            'status': 'تم التسليم', 'notes': 'Handed over'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], DELIVERED)

        detail = self.client.get(f'/api/v1/shipments/{shipment.pk}/')
        self.assertEqual([h['status'] for h in detail.data['history']], [DELIVERED])

    def test_change_status_rejects_unknown(self):
        shipment = TestDataFactory.create_shipment(self.user)
        response = self.client.post(f'/api/v1/shipments/{shipment.pk}/status/', {'status': 'lost'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bulk_status(self):
        first = TestDataFactory.create_shipment(self.user)
        second = TestDataFactory.create_shipment(self.user, status=IN_TRANSIT)
        response = self.client.post('/api/v1/shipments/bulk-status/', {
            'shipment_ids': [first.pk, second.pk], 'status': 'in_transit'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['updated'], 2)
        self.assertEqual(response.data['changed'], 1)

    def test_bulk_status_unknown_id(self):
        response = self.client.post('/api/v1/shipments/bulk-status/', {
            'shipment_ids': [987654], 'status': 'pending'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filter_by_status_list(self):
        TestDataFactory.create_shipment(self.user, status=PENDING)
        TestDataFactory.create_shipment(self.user, status=DELIVERED)
        TestDataFactory.create_shipment(self.user, status=RECEIVED)
        response = self.client.get('/api/v1/shipments/', {'status': 'pending,delivered'})
        self.assertEqual(sorted(s['status'] for s in response.data), [DELIVERED, PENDING])

    def test_filter_unassigned(self):
        trip = TestDataFactory.create_trip(self.user)
        TestDataFactory.create_shipment(self.user, trip=trip)
        free = TestDataFactory.create_shipment(self.user)
        response = self.client.get('/api/v1/shipments/', {'unassigned': 'true'})
        self.assertEqual([s['id'] for s in response.data], [free.pk])

    def test_summary(self):
        TestDataFactory.create_shipment(self.user)
        TestDataFactory.create_shipment(self.user, shipping_fee=Decimal('20.00'), shipping_fee_currency='TRY')
        response = self.client.get('/api/v1/shipments/summary/')
        self.assertEqual(response.data['total'], 2)
        self.assertEqual(response.data['collectible_totals'], {'TRY': '20.00', 'USD': '10.00'})
        received = [row for row in response.data['by_status'] if row['status'] == RECEIVED][0]
        self.assertEqual(received['count'], 2)

    def test_export_is_xlsx(self):
        shipment = TestDataFactory.create_shipment(self.user)
        response = self.client.get('/api/v1/shipments/export/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'],
                         'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet')
        wb = openpyxl.load_workbook(io.BytesIO(response.content))
        ws = wb['Shipments']
        self.assertEqual(ws.cell(row=2, column=1).value, shipment.shipment_number)

    def test_label_is_png(self):
        shipment = TestDataFactory.create_shipment(self.user, recipient_name='Lina Haddad', sender_name='Omar')
        response = self.client.get(f'/api/v1/shipments/{shipment.pk}/label/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'image/png')
        self.assertTrue(response.content.startswith(b'\x89PNG'))

    def test_customer_cannot_list(self):
        customer = TestDataFactory.create_user(role='customer')
        self.client.authenticate_user(customer)
        response = self.client.get('/api/v1/shipments/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class TrackingTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()

    def test_public_tracking_is_case_insensitive(self):
        shipment = TestDataFactory.create_shipment(self.user)
        response = self.client.get(f'/api/v1/shipments/track/{shipment.shipment_number.lower()}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['shipment_number'], shipment.shipment_number)
        self.assertNotIn('recipient_phone', response.data)

    def test_tracking_unknown_number(self):
        response = self.client.get('/api/v1/shipments/track/SHP-NOPE/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_my_shipments_matches_either_phone_once(self):
        customer = TestDataFactory.create_user(role='customer', phone='0988888888')
        own = TestDataFactory.create_shipment(self.user, sender_phone='0988888888', recipient_phone='0988888888')
        received = TestDataFactory.create_shipment(self.user, recipient_phone='0988888888')
        TestDataFactory.create_shipment(self.user)

        self.client.authenticate_user(customer)
        response = self.client.get('/api/v1/shipments/mine/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(sorted(s['id'] for s in response.data['shipments']), sorted([own.pk, received.pk]))

    def test_my_shipments_without_phone(self):
        customer = TestDataFactory.create_user(role='customer')
        self.client.authenticate_user(customer)
        response = self.client.get('/api/v1/shipments/mine/')
        self.assertEqual(response.data['shipments'], [])
        self.assertIn('message', response.data)
