"""
Tests for trips: creation with stations, manifests, status cascade, deletion and totals
"""
import io
from decimal import Decimal

import openpyxl
from django.test import TestCase
from rest_framework import status

from backend.core.exceptions import DispatchError
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.shipments.models import Shipment
from backend.shipments.status import DELIVERED, IN_TRANSIT, PENDING
from backend.trips.models import Trip, TripStation
from backend.trips.services import assign_shipments, change_trip_status, create_manifest, delete_trip


class TripModelTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()

    def test_expense_totals_keep_currencies_apart(self):
        trip = TestDataFactory.create_trip(
            self.user,
            office_expenses=Decimal('10.00'), office_expenses_currency='USD',
            car_expenses=Decimal('300.00'), car_expenses_currency='TRY',
            vehicle_rental=Decimal('40.00'),
            expense1_name='Fuel', expense1_value=Decimal('5.00'), expense1_currency='USD',
        )
        self.assertEqual(trip.expense_totals(), {'USD': Decimal('55.00'), 'TRY': Decimal('300.00')})

    def test_profit_is_collections_minus_expenses(self):
        trip = TestDataFactory.create_trip(self.user, car_expenses=Decimal('4.00'))
        TestDataFactory.create_shipment(self.user, trip=trip)
        TestDataFactory.create_shipment(self.user, trip=trip, shipping_fee=Decimal('50.00'),
                                        shipping_fee_currency='SYP')
        self.assertEqual(trip.collection_totals(), {'USD': Decimal('10.00'), 'SYP': Decimal('50.00')})
        self.assertEqual(trip.profit_totals(), {'USD': Decimal('6.00'), 'SYP': Decimal('50.00')})

    def test_commission_key(self):
        trip = TestDataFactory.create_trip(self.user)
        station = TestDataFactory.create_station(trip, station_name='Hama', order_index=2)
        self.assertEqual(station.commission_key, f'{trip.pk}-Hama-2')


class TripServiceTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.vehicle = TestDataFactory.create_vehicle()

    def test_assign_rejects_shipment_on_other_trip(self):
        other = TestDataFactory.create_trip(self.user)
        shipment = TestDataFactory.create_shipment(self.user, trip=other)
        trip = TestDataFactory.create_trip(self.user, vehicle=self.vehicle)
        with self.assertRaises(DispatchError):
            assign_shipments(trip, [shipment.pk])

    def test_assign_uses_trip_vehicle(self):
        trip = TestDataFactory.create_trip(self.user, vehicle=self.vehicle)
        shipment = TestDataFactory.create_shipment(self.user)
        assign_shipments(trip, [shipment.pk])
        shipment.refresh_from_db()
        self.assertEqual(shipment.trip, trip)
        self.assertEqual(shipment.vehicle, self.vehicle)

    def test_manifest_moves_shipments_in_transit(self):
        first = TestDataFactory.create_shipment(self.user, governorate='Homs')
        second = TestDataFactory.create_shipment(self.user, governorate='Aleppo')
        trip = create_manifest(self.vehicle, [first.pk, second.pk], user=self.user)

        self.assertEqual(trip.source, 'manifest')
        self.assertEqual(trip.status, PENDING)
        self.assertEqual(trip.destination_cities, ['Aleppo', 'Homs'])
        for shipment in Shipment.objects.filter(pk__in=[first.pk, second.pk]):
            self.assertEqual(shipment.status, IN_TRANSIT)
            self.assertEqual(shipment.trip, trip)
            self.assertEqual(shipment.vehicle, self.vehicle)

    def test_manifest_rejects_assigned_shipment(self):
        shipment = TestDataFactory.create_shipment(self.user, trip=TestDataFactory.create_trip(self.user))
        with self.assertRaises(DispatchError):
            create_manifest(self.vehicle, [shipment.pk], user=self.user)
        self.assertFalse(Trip.objects.filter(source='manifest').exists())

    def test_status_cascades_to_shipments(self):
        trip = TestDataFactory.create_trip(self.user)
        shipment = TestDataFactory.create_shipment(self.user, trip=trip)
        already = TestDataFactory.create_shipment(self.user, trip=trip, status=DELIVERED)
        changed = change_trip_status(trip, DELIVERED, user=self.user)
        self.assertEqual(changed, 1)
        shipment.refresh_from_db()
        self.assertEqual(shipment.status, DELIVERED)
        self.assertEqual(already.status_updates.count(), 0)

    def test_delete_releases_shipments(self):
        trip = TestDataFactory.create_trip(self.user, vehicle=self.vehicle)
        station = TestDataFactory.create_station(trip)
        shipment = TestDataFactory.create_shipment(self.user, trip=trip, station=station,
                                                   vehicle=self.vehicle, status=IN_TRANSIT)
        self.assertEqual(delete_trip(trip, user=self.user), 1)
        shipment.refresh_from_db()
        self.assertIsNone(shipment.trip)
        self.assertIsNone(shipment.station)
        self.assertIsNone(shipment.vehicle)
        self.assertEqual(shipment.status, PENDING)
        self.assertFalse(TripStation.objects.exists())


class TripAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user(role='employee')
        self.vehicle = TestDataFactory.create_vehicle(vehicle_number='ALP-77', owner_name='Abu Ali')
        self.driver = TestDataFactory.create_driver()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _payload(self, **overrides):
        payload = {
            'trip_name': 'Aleppo run',
            'vehicle': self.vehicle.pk,
            'destination': 'Aleppo',
            'owner_name': 'Abu Ali',
            'car_expenses': '20.00',
            'stations': [{
                'station_name': 'Aleppo center',
                'driver': self.driver.pk,
                'commission_percentage': '10.00',
            }],
        }
        payload.update(overrides)
        return payload

    def test_create_trip_with_stations(self):
        shipment = TestDataFactory.create_shipment(self.user)
        payload = self._payload()
        payload['stations'][0]['shipment_ids'] = [shipment.pk]
        response = self.client.post('/api/v1/trips/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['vehicle_number'], 'ALP-77')
        self.assertEqual(len(response.data['stations']), 1)
        self.assertEqual(response.data['stations'][0]['driver_name'], self.driver.driver_name)
        self.assertEqual([s['id'] for s in response.data['shipments']], [shipment.pk])
        self.assertEqual(response.data['totals']['profit'], {'USD': '-10.00'})
        self.assertTrue(AuditLog.objects.filter(action='trip_create').exists())

    def test_create_requires_station(self):
        response = self.client.post('/api/v1/trips/', self._payload(stations=[]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('stations', response.data)

    def test_create_rejects_zero_commission(self):
        payload = self._payload()
        payload['stations'][0]['commission_percentage'] = '0'
        response = self.client.post('/api/v1/trips/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_requires_header_fields(self):
        response = self.client.post('/api/v1/trips/', self._payload(destination='', owner_name=''), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('destination', response.data)
        self.assertIn('owner_name', response.data)

    def test_create_rolls_back_on_taken_shipment(self):
        shipment = TestDataFactory.create_shipment(self.user, trip=TestDataFactory.create_trip(self.user))
        payload = self._payload()
        payload['stations'][0]['shipment_ids'] = [shipment.pk]
        response = self.client.post('/api/v1/trips/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['field'], 'shipment_ids')
        self.assertFalse(Trip.objects.filter(trip_name='Aleppo run').exists())

    def test_change_status_endpoint(self):
        trip = TestDataFactory.create_trip(self.user)
        TestDataFactory.create_shipment(self.user, trip=trip)
        response = self.client.post(f'/api/v1/trips/{trip.pk}/status/', {'status': 'in_transit'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['shipments_updated'], 1)
        self.assertEqual(Shipment.objects.get(trip=trip).status, IN_TRANSIT)

    def test_trip_rejects_shipment_only_status(self):
        trip = TestDataFactory.create_trip(self.user)
        response = self.client.post(f'/api/v1/trips/{trip.pk}/status/', {'status': 'returned'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_patch_status_cascades(self):
        trip = TestDataFactory.create_trip(self.user)
        shipment = TestDataFactory.create_shipment(self.user, trip=trip)
        response = self.client.patch(f'/api/v1/trips/{trip.pk}/', {'status': 'delivered'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        shipment.refresh_from_db()
        self.assertEqual(shipment.status, DELIVERED)

    def test_manifest_endpoint(self):
        shipment = TestDataFactory.create_shipment(self.user)
        response = self.client.post('/api/v1/trips/manifest/', {
            'vehicle': self.vehicle.pk, 'shipment_ids': [shipment.pk]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['source'], 'manifest')
        self.assertEqual(response.data['trip_name'], 'Manifest ALP-77')

    def test_assign_and_unassign(self):
        trip = TestDataFactory.create_trip(self.user, vehicle=self.vehicle)
        station = TestDataFactory.create_station(trip, self.driver)
        shipment = TestDataFactory.create_shipment(self.user)

        response = self.client.post(f'/api/v1/trips/{trip.pk}/assign/', {
            'shipment_ids': [shipment.pk], 'station': station.pk
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        shipment.refresh_from_db()
        self.assertEqual(shipment.station, station)

        response = self.client.post(f'/api/v1/trips/{trip.pk}/unassign/', {
            'shipment_ids': [shipment.pk]
        }, format='json')
        self.assertEqual(response.data['unassigned'], 1)
        shipment.refresh_from_db()
        self.assertIsNone(shipment.trip)
        self.assertEqual(shipment.status, PENDING)

    def test_delete_endpoint(self):
        trip = TestDataFactory.create_trip(self.user)
        shipment = TestDataFactory.create_shipment(self.user, trip=trip, status=IN_TRANSIT)
        response = self.client.delete(f'/api/v1/trips/{trip.pk}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        shipment.refresh_from_db()
        self.assertEqual(shipment.status, PENDING)
        self.assertTrue(AuditLog.objects.filter(action='trip_delete').exists())

    def test_totals_endpoint(self):
        trip = TestDataFactory.create_trip(self.user, office_expenses=Decimal('3.00'))
        TestDataFactory.create_shipment(self.user, trip=trip)
        response = self.client.get(f'/api/v1/trips/{trip.pk}/totals/')
        self.assertEqual(response.data['collections'], {'USD': '10.00'})
        self.assertEqual(response.data['profit'], {'USD': '7.00'})

    def test_list_filters_by_status_label(self):
        TestDataFactory.create_trip(self.user, status=PENDING)
        TestDataFactory.create_trip(self.user, status=DELIVERED)
        response = self.client.get('/api/v1/trips/', {'status': 'قيد الانتظار'})
        self.assertEqual([t['status'] for t in response.data], [PENDING])

    def test_export_sheets(self):
        trip = TestDataFactory.create_trip(self.user)
        TestDataFactory.create_station(trip, self.driver)
        response = self.client.get(f'/api/v1/trips/{trip.pk}/export/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        wb = openpyxl.load_workbook(io.BytesIO(response.content))
        self.assertEqual(wb.sheetnames, ['Trip', 'Stations', 'Shipments', 'Branch Items', 'Totals'])
