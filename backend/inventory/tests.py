"""
Tests for branch entries: BOL numbering, item dispatch, bulk dispatch and linking
"""
from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from backend.core.exceptions import DispatchError
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.dispatch import bulk_dispatch, dispatch_item, parse_cities
from backend.inventory.models import BranchEntry, BranchEntryItem, DispatchRecord, TripDispatchItem, generate_bol_number
from backend.shipments.status import IN_TRANSIT
from backend.trips.models import Trip


class BolNumberTests(TestCase):
    def test_numbers_increase_within_year(self):
        year = timezone.now().year
        first = TestDataFactory.create_branch_entry()
        second = TestDataFactory.create_branch_entry()
        self.assertEqual(first.bol_number, f'BOL-{year}-001')
        self.assertEqual(second.bol_number, f'BOL-{year}-002')

    def test_next_number_follows_highest(self):
        year = timezone.now().year
        BranchEntry.objects.create(bol_number=f'BOL-{year}-010')
        BranchEntry.objects.create(bol_number=f'BOL-{year - 1}-500')
        self.assertEqual(generate_bol_number(), f'BOL-{year}-011')

    def test_branch_name_snapshot(self):
        branch = TestDataFactory.create_branch(name='Tartus')
        entry = TestDataFactory.create_branch_entry(branch=branch)
        self.assertEqual(entry.branch_name, 'Tartus')


class DispatchItemTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.entry = TestDataFactory.create_branch_entry(self.user)
        self.item = self.entry.items.get()

    def test_partial_then_full_dispatch(self):
        item, record = dispatch_item(self.item.pk, 2, 'customer', user=self.user,
                                     customer_name='Rami', destination_governorate='Homs')
        self.assertEqual(item.dispatched_quantity, 2)
        self.assertEqual(item.item_status, 'partially_dispatched')
        self.assertEqual(record.destination_governorate, 'Homs')

        item, _ = dispatch_item(self.item.pk, 3, 'branch', user=self.user, target_branch_name='Hama')
        self.assertEqual(item.remaining_quantity, 0)
        self.assertEqual(item.item_status, 'fully_dispatched')
        self.assertEqual(DispatchRecord.objects.filter(item=self.item).count(), 2)

    def test_amount_above_remaining_rejected(self):
        with self.assertRaises(DispatchError) as ctx:
            dispatch_item(self.item.pk, 6, 'branch', target_branch_name='Hama')
        self.assertEqual(ctx.exception.message, 'Quantity to dispatch must be between 1 and 5.')

    def test_customer_needs_name_and_governorate(self):
        with self.assertRaises(DispatchError):
            dispatch_item(self.item.pk, 1, 'customer', customer_name='Rami')
        self.item.refresh_from_db()
        self.assertEqual(self.item.dispatched_quantity, 0)

    def test_branch_needs_target(self):
        with self.assertRaises(DispatchError):
            dispatch_item(self.item.pk, 1, 'branch')


class BulkDispatchTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.vehicle = TestDataFactory.create_vehicle(vehicle_number='LTK-5')

    def test_parse_cities(self):
        self.assertEqual(parse_cities('Aleppo, Homs،Hama'), ['Aleppo', 'Homs', 'Hama'])
        self.assertEqual(parse_cities(['Idlib', ' ']), ['Idlib'])
        self.assertEqual(parse_cities(None), [])

    def test_bulk_dispatch_empties_entries(self):
        entry = TestDataFactory.create_branch_entry(self.user, items=[
            {'item_description': 'Rice', 'item_quantity': 4, 'item_value': Decimal('40.00')},
            {'item_description': 'Oil', 'item_quantity': 2, 'dispatched_quantity': 2},
        ])
        other = TestDataFactory.create_branch_entry(self.user)
        trip, count = bulk_dispatch([entry.pk, other.pk], self.vehicle, 'Aleppo, Homs', user=self.user,
                                    expenses={'car_expenses': Decimal('15.00')})

        self.assertEqual(count, 2)
        self.assertEqual(trip.source, 'bulk_dispatch')
        self.assertEqual(trip.status, IN_TRANSIT)
        self.assertEqual(trip.destination_cities, ['Aleppo', 'Homs'])
        self.assertEqual(trip.car_expenses, Decimal('15.00'))
        self.assertEqual(TripDispatchItem.objects.filter(trip=trip).count(), 2)
        for item in BranchEntryItem.objects.all():
            self.assertEqual(item.remaining_quantity, 0)
        self.assertEqual(trip.collection_totals(), {'USD': Decimal('40.00')})

    def test_nothing_left_to_dispatch(self):
        entry = TestDataFactory.create_branch_entry(self.user, items=[
            {'item_description': 'Oil', 'item_quantity': 2, 'dispatched_quantity': 2},
        ])
        with self.assertRaises(DispatchError):
            bulk_dispatch([entry.pk], self.vehicle, ['Aleppo'], user=self.user)

    def test_cities_required(self):
        entry = TestDataFactory.create_branch_entry(self.user)
        with self.assertRaises(DispatchError):
            bulk_dispatch([entry.pk], self.vehicle, ' , ', user=self.user)

    def test_partially_dispatched_item_sends_only_remainder(self):
        entry = TestDataFactory.create_branch_entry(self.user, items=[
            {'item_description': 'Tiles', 'item_quantity': 10, 'dispatched_quantity': 3,
             'item_status': 'partially_dispatched'},
        ])
        trip, count = bulk_dispatch([entry.pk], self.vehicle, 'Hama', user=self.user)

        self.assertEqual(count, 1)
        item = entry.items.get()
        self.assertEqual(item.dispatched_quantity, 10)
        self.assertEqual(item.item_status, 'fully_dispatched')
        self.assertEqual(item.assigned_trip, trip)
        record = DispatchRecord.objects.get(item=item)
        self.assertEqual(record.dispatched_amount, 7)
        self.assertEqual(record.destination_type, 'bulk_dispatch_trip')
        self.assertEqual(TripDispatchItem.objects.get(trip=trip).quantity, 7)

    def test_failure_midway_rolls_everything_back(self):
        entry = TestDataFactory.create_branch_entry(self.user, items=[
            {'item_description': 'Rice', 'item_quantity': 4},
            {'item_description': 'Oil', 'item_quantity': 2},
        ])
        with mock.patch('backend.inventory.dispatch.TripDispatchItem') as trip_items:
            trip_items.objects.create.side_effect = DatabaseError('write failed')
            with self.assertRaises(DatabaseError):
                bulk_dispatch([entry.pk], self.vehicle, 'Aleppo', user=self.user)

        self.assertFalse(Trip.objects.exists())
        self.assertFalse(DispatchRecord.objects.exists())
        for item in entry.items.all():
            self.assertEqual(item.dispatched_quantity, 0)
            self.assertEqual(item.item_status, 'received')
            self.assertIsNone(item.assigned_trip)


class BranchEntryAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user(role='employee')
        self.branch = TestDataFactory.create_branch()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_entry_with_items(self):
        response = self.client.post('/api/v1/branch-entries/', {
            'entry_type': 'incoming',
            'branch': self.branch.pk,
            'items': [
                {'item_description': 'Tyres', 'item_quantity': 4},
                {'item_description': 'Batteries', 'item_quantity': 2},
            ],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_quantity'], 6)
        self.assertEqual(response.data['branch_name'], self.branch.name)
        self.assertEqual([i['order_index'] for i in response.data['items']], [0, 1])

    def test_create_requires_items(self):
        response = self.client.post('/api/v1/branch-entries/', {
            'entry_type': 'incoming', 'branch': self.branch.pk, 'items': []
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(BranchEntry.objects.exists())

    def test_dispatch_endpoint(self):
        entry = TestDataFactory.create_branch_entry(self.user, self.branch)
        item = entry.items.get()
        response = self.client.post(f'/api/v1/branch-entry-items/{item.pk}/dispatch/', {
            'amount': 5, 'destination_type': 'branch', 'target_branch_name': 'Hama'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['item_status'], 'fully_dispatched')
        self.assertTrue(AuditLog.objects.filter(action='item_dispatch').exists())

    def test_dispatch_endpoint_rejects_zero(self):
        entry = TestDataFactory.create_branch_entry(self.user, self.branch)
        item = entry.items.get()
        response = self.client.post(f'/api/v1/branch-entry-items/{item.pk}/dispatch/', {
            'amount': 0, 'destination_type': 'branch', 'target_branch_name': 'Hama'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['field'], 'amount')

    def test_pending_and_fully_dispatched_lists(self):
        open_entry = TestDataFactory.create_branch_entry(self.user, self.branch)
        done_entry = TestDataFactory.create_branch_entry(self.user, self.branch, items=[
            {'item_description': 'Oil', 'item_quantity': 2, 'dispatched_quantity': 2},
        ])
        TestDataFactory.create_branch_entry(self.user, self.branch, entry_type='outgoing')

        response = self.client.get('/api/v1/branch-entries/pending/')
        self.assertEqual([e['id'] for e in response.data], [open_entry.pk])

        response = self.client.get('/api/v1/branch-entries/fully-dispatched/')
        self.assertEqual([e['id'] for e in response.data], [done_entry.pk])

    def test_bulk_dispatch_endpoint(self):
        entry = TestDataFactory.create_branch_entry(self.user, self.branch)
        vehicle = TestDataFactory.create_vehicle()
        response = self.client.post('/api/v1/branch-entries/bulk-dispatch/', {
            'entry_ids': [entry.pk],
            'vehicle': vehicle.pk,
            'destination_cities': ['Aleppo'],
            'office_expenses': '5.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['items_dispatched'], 1)
        self.assertEqual(response.data['trip']['source'], 'bulk_dispatch')

    def test_link_vehicle(self):
        entry = TestDataFactory.create_branch_entry(self.user, self.branch)
        vehicle = TestDataFactory.create_vehicle(vehicle_number='DMS-3')
        response = self.client.post(f'/api/v1/branch-entries/{entry.pk}/link-vehicle/', {
            'vehicle': vehicle.pk,
            'sender_name': 'Abu Samer',
            'converted_value': '120.00',
            'custom_fees': [{'name': 'Loading', 'amount': '3.50'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'linked')
        self.assertEqual(response.data['vehicle_name'], 'DMS-3')
        self.assertEqual(response.data['custom_fees'][0]['amount'], '3.50')
        self.assertIsNotNone(response.data['linked_at'])

    def test_cannot_delete_after_dispatch(self):
        entry = TestDataFactory.create_branch_entry(self.user, self.branch)
        dispatch_item(entry.items.get().pk, 1, 'branch', target_branch_name='Hama')
        response = self.client.delete(f'/api/v1/branch-entries/{entry.pk}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_items_locked_after_dispatch(self):
        entry = TestDataFactory.create_branch_entry(self.user, self.branch)
        dispatch_item(entry.items.get().pk, 1, 'branch', target_branch_name='Hama')
        response = self.client.patch(f'/api/v1/branch-entries/{entry.pk}/', {
            'items': [{'item_description': 'New', 'item_quantity': 1}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
