"""
Tests for authentication, roles, reference numbers, currency helpers and cache invalidation
"""
import io
from decimal import Decimal

from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status

from backend.core.cache_utils import DASHBOARD_KEY_PREFIX, invalidate_dashboard_cache, make_cache_key
from backend.core.currency import (
    add_amount, merge_totals, subtract_totals, sum_by_currency, to_decimal, totals_to_strings
)
from backend.core.models import AuditLog, Counter
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.utils import next_reference, next_sequence
from backend.finance.models import FinancialTransaction
from backend.inventory.models import BranchEntry
from backend.parties.models import Customer
from backend.reports.views import build_dashboard
from backend.shipments.models import Shipment
from backend.trips.models import Trip


class AuthTests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_register_always_creates_customer(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'newcustomer',
            'email': 'new@test.com',
            'password': 'Sh1pping-Pass-2024',
            'password_confirm': 'Sh1pping-Pass-2024',
            'phone': '0933333333',
            'role': 'admin',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['role'], 'customer')
        self.assertIn('access', response.data)

    def test_register_password_mismatch(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'mismatch',
            'password': 'Sh1pping-Pass-2024',
            'password_confirm': 'something-else-2024',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login_assigns_default_role(self):
        user = TestDataFactory.create_user(username='norole', role='')
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'norole',
            'password': 'testpass123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], 'customer')
        user.refresh_from_db()
        self.assertEqual(user.role, 'customer')

    def test_superuser_defaults_to_admin(self):
        user = TestDataFactory.create_user(role='', is_superuser=True)
        self.assertEqual(user.ensure_role(), 'admin')

    def test_me_flags_for_employee(self):
        user = TestDataFactory.create_user(role='employee')
        self.client.authenticate_user(user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_admin'])
        self.assertTrue(response.data['can_access_operations'])
        self.assertFalse(response.data['can_access_finance'])

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class UserRoleTests(TestCase):
    def setUp(self):
        self.admin = TestDataFactory.create_user(role='admin')
        self.employee = TestDataFactory.create_user(role='employee')
        self.client = AuthenticatedAPIClient()

    def test_admin_changes_role(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post(f'/api/v1/users/{self.employee.pk}/role/', {'role': 'admin'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.employee.refresh_from_db()
        self.assertEqual(self.employee.role, 'admin')
        self.assertTrue(AuditLog.objects.filter(action='role_change', object_id=str(self.employee.pk)).exists())

    def test_employee_cannot_change_role(self):
        self.client.authenticate_user(self.employee)
        response = self.client.post(f'/api/v1/users/{self.admin.pk}/role/', {'role': 'customer'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_invalid_role_rejected(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post(f'/api/v1/users/{self.employee.pk}/role/', {'role': 'owner'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_cannot_delete_self(self):
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/users/{self.admin.pk}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_customer_cannot_search(self):
        customer = TestDataFactory.create_user(role='customer')
        self.client.authenticate_user(customer)
        response = self.client.get('/api/v1/search/', {'q': 'abc'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_search_finds_shipment(self):
        shipment = TestDataFactory.create_shipment(self.admin, recipient_name='Findable Person')
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/search/', {'q': 'Findable'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s['id'] for s in response.data['shipments']], [shipment.pk])


class SequenceTests(TestCase):
    def test_next_sequence_increments(self):
        self.assertEqual(next_sequence('demo'), 1)
        self.assertEqual(next_sequence('demo'), 2)
        self.assertEqual(next_sequence('other'), 1)

    def test_next_reference_is_zero_padded(self):
        self.assertEqual(next_reference('refs', 'SH'), 'SH-00001')
        self.assertEqual(next_reference('refs', 'SH'), 'SH-00002')
        self.assertEqual(next_reference('short', 'TR', width=3), 'TR-001')


class CurrencyTests(TestCase):
    def test_to_decimal_treats_garbage_as_zero(self):
        self.assertEqual(to_decimal(''), Decimal('0.00'))
        self.assertEqual(to_decimal('abc'), Decimal('0.00'))
        self.assertEqual(to_decimal('12.5'), Decimal('12.5'))

    def test_currencies_are_never_mixed(self):
        totals = sum_by_currency([('USD', '10'), ('TRY', '5'), ('USD', '2.5')])
        self.assertEqual(totals, {'USD': Decimal('12.5'), 'TRY': Decimal('5')})

    def test_zero_amounts_are_skipped(self):
        self.assertEqual(add_amount({}, 'USD', 0), {})

    def test_merge_and_subtract(self):
        merged = merge_totals({'USD': Decimal('1')}, {'USD': Decimal('2'), 'SYP': Decimal('100')})
        self.assertEqual(merged, {'USD': Decimal('3'), 'SYP': Decimal('100')})
        self.assertEqual(subtract_totals({'USD': Decimal('3')}, {'TRY': Decimal('4')}),
                         {'USD': Decimal('3'), 'TRY': Decimal('-4')})

    def test_totals_to_strings(self):
        self.assertEqual(totals_to_strings({'USD': Decimal('3'), 'TRY': Decimal('1.5')}),
                         {'TRY': '1.50', 'USD': '3.00'})

    def test_missing_currency_defaults_to_usd(self):
        self.assertEqual(add_amount({}, None, 5), {'USD': Decimal('5')})
        self.assertEqual(add_amount({}, '', '2.5'), {'USD': Decimal('2.5')})
        totals = sum_by_currency([(None, '10'), ('USD', '1'), ('TRY', '3')])
        self.assertEqual(totals, {'USD': Decimal('11'), 'TRY': Decimal('3')})


class ClearDataCommandTests(TestCase):
    def test_clears_operations_and_keeps_reference_data(self):
        user = TestDataFactory.create_user()
        customer = TestDataFactory.create_customer()
        trip = TestDataFactory.create_trip(user)
        TestDataFactory.create_shipment(user, trip=trip)
        TestDataFactory.create_branch_entry(user)
        TestDataFactory.create_transaction(user, customer=customer)

        call_command('clear_data', '--confirm', stdout=io.StringIO())

        self.assertFalse(Shipment.objects.exists())
        self.assertFalse(Trip.objects.exists())
        self.assertFalse(BranchEntry.objects.exists())
        self.assertFalse(FinancialTransaction.objects.exists())
        self.assertFalse(Counter.objects.exists())
        self.assertTrue(Customer.objects.filter(pk=customer.pk).exists())
        self.assertEqual(next_reference('transactions', 'SH'), 'SH-00001')


LOCMEM_CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'cache-invalidation-tests',
    }
}


@override_settings(CACHES=LOCMEM_CACHES)
class CacheInvalidationTests(TestCase):
    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_user(role='admin')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def tearDown(self):
        cache.clear()

    def test_bump_changes_cache_keys(self):
        before = make_cache_key(DASHBOARD_KEY_PREFIX, 'day')
        self.assertEqual(make_cache_key(DASHBOARD_KEY_PREFIX, 'day'), before)
        invalidate_dashboard_cache()
        self.assertNotEqual(make_cache_key(DASHBOARD_KEY_PREFIX, 'day'), before)

    def test_new_branch_appears_in_cached_list(self):
        response = self.client.get('/api/v1/branches/')
        self.assertEqual(response.data, [])

        response = self.client.post('/api/v1/branches/', {'name': 'Latakia Port'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get('/api/v1/branches/')
        self.assertEqual([b['name'] for b in response.data], ['Latakia Port'])

    def test_customer_changes_refresh_cached_list(self):
        customer = TestDataFactory.create_customer(name='Rami')
        response = self.client.get('/api/v1/customers/')
        self.assertEqual([c['name'] for c in response.data], ['Rami'])

        customer.name = 'Rami Haddad'
        customer.save()
        response = self.client.get('/api/v1/customers/')
        self.assertEqual([c['name'] for c in response.data], ['Rami Haddad'])

        customer.delete()
        response = self.client.get('/api/v1/customers/')
        self.assertEqual(response.data, [])

    def test_dashboard_follows_new_shipments(self):
        day = timezone.localdate()
        self.assertEqual(build_dashboard(day)['shipments_total'], 0)
        TestDataFactory.create_shipment(self.admin)
        self.assertEqual(build_dashboard(day)['shipments_total'], 1)

    def test_dashboard_is_served_from_cache_between_changes(self):
        day = timezone.localdate()
        first = build_dashboard(day)
        with self.assertNumQueries(0):
            self.assertEqual(build_dashboard(day), first)
