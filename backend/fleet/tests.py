"""
Tests for vehicles and drivers
"""
from django.test import TestCase
from rest_framework import status

from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class VehicleAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user(role='employee')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_vehicle(self):
        response = self.client.post('/api/v1/vehicles/', {
            'vehicle_number': 'ALP-1234',
            'owner_name': 'Abu Omar',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'active')

    def test_vehicle_number_is_unique(self):
        TestDataFactory.create_vehicle(vehicle_number='ALP-1')
        response = self.client.post('/api/v1/vehicles/', {'vehicle_number': 'ALP-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_search_vehicles(self):
        TestDataFactory.create_vehicle(vehicle_number='DAM-9', owner_name='Khaled')
        TestDataFactory.create_vehicle(vehicle_number='HMS-2', owner_name='Samir')
        response = self.client.get('/api/v1/vehicles/', {'search': 'khal'})
        self.assertEqual([v['vehicle_number'] for v in response.data], ['DAM-9'])


class DriverAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user(role='admin')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_driver_counts_trips_and_shipments(self):
        driver = TestDataFactory.create_driver(driver_name='Mahmoud')
        trip = TestDataFactory.create_trip(self.user)
        station = TestDataFactory.create_station(trip, driver)
        TestDataFactory.create_shipment(self.user, trip=trip, station=station)
        TestDataFactory.create_shipment(self.user, trip=trip, station=station)

        response = self.client.get(f'/api/v1/drivers/{driver.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_trips'], 1)
        self.assertEqual(response.data['total_shipments'], 2)

    def test_create_driver_requires_name(self):
        response = self.client.post('/api/v1/drivers/', {'driver_phone': '0999'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
