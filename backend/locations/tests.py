"""
Tests for branches
"""
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status

from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.locations.models import Branch


class BranchAPITests(TestCase):
    def setUp(self):
        self.admin = TestDataFactory.create_user(role='admin')
        self.employee = TestDataFactory.create_user(role='employee')
        self.client = AuthenticatedAPIClient()

    def test_admin_creates_branch(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/branches/', {'name': 'Aleppo Center', 'location': 'Aleppo'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'active')

    def test_employee_cannot_create_branch(self):
        self.client.authenticate_user(self.employee)
        response = self.client.post('/api/v1/branches/', {'name': 'Nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_employee_lists_branches(self):
        TestDataFactory.create_branch(name='Homs')
        TestDataFactory.create_branch(name='Hama', status='inactive')
        self.client.authenticate_user(self.employee)
        response = self.client.get('/api/v1/branches/', {'status': 'active'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([b['name'] for b in response.data], ['Homs'])

    def test_customer_cannot_list_branches(self):
        customer = TestDataFactory.create_user(role='customer')
        self.client.authenticate_user(customer)
        response = self.client.get('/api/v1/branches/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_branch_with_transfers_cannot_be_deleted(self):
        branch = TestDataFactory.create_branch()
        TestDataFactory.create_transfer(self.admin, from_branch=branch)
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/branches/{branch.pk}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Branch.objects.filter(pk=branch.pk).exists())


class DefaultBranchesCommandTests(TestCase):
    def test_creates_branches_once(self):
        call_command('create_default_branches')
        self.assertEqual(Branch.objects.count(), 4)
        call_command('create_default_branches')
        self.assertEqual(Branch.objects.count(), 4)
