"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from backend.locations.models import Branch
from backend.fleet.models import Vehicle, Driver
from backend.parties.models import Customer
from backend.shipments.models import Shipment
from backend.trips.models import Trip, TripStation
from backend.inventory.models import BranchEntry, BranchEntryItem
from backend.finance.models import FinancialTransaction, BranchTransfer
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='admin', phone='',
                    is_staff=False, is_superuser=False):
        """Create a test user; admins by default so operations are reachable"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        user = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            phone=phone,
            is_staff=is_staff,
            is_superuser=is_superuser
        )
        return user

    @staticmethod
    def create_branch(name=None, code=None, status='active'):
        """Create a test branch"""
        if not name:
            name = f'Branch_{TestDataFactory.random_string(6)}'
        return Branch.objects.create(
            name=name,
            code=code or f'BR_{TestDataFactory.random_string(4).upper()}',
            location=f'Location {name}',
            phone='0930000000',
            status=status
        )

    @staticmethod
    def create_vehicle(vehicle_number=None, owner_name='Owner', status='active'):
        """Create a test vehicle"""
        if not vehicle_number:
            vehicle_number = f'VH-{TestDataFactory.random_string(5).upper()}'
        return Vehicle.objects.create(
            vehicle_number=vehicle_number,
            vehicle_type='Truck',
            owner_name=owner_name,
            owner_phone='0940000000',
            status=status
        )

    @staticmethod
    def create_driver(driver_name=None, driver_phone='0950000000'):
        """Create a test driver"""
        if not driver_name:
            driver_name = f'Driver_{TestDataFactory.random_string(6)}'
        return Driver.objects.create(driver_name=driver_name, driver_phone=driver_phone)

    @staticmethod
    def create_customer(name=None, phone=None, customer_type='both'):
        """Create a test customer"""
        if not name:
            name = f'Customer_{TestDataFactory.random_string(6)}'
        if not phone:
            phone = f'09{random.randint(10000000, 99999999)}'
        return Customer.objects.create(name=name, phone=phone, customer_type=customer_type)

    @staticmethod
    def create_shipment(user=None, **kwargs):
        """Create a test shipment; keyword arguments override the defaults"""
        data = {
            'recipient_name': f'Recipient_{TestDataFactory.random_string(5)}',
            'recipient_phone': '0991111111',
            'sender_name': f'Sender_{TestDataFactory.random_string(5)}',
            'sender_phone': '0992222222',
            'governorate': 'Aleppo',
            'parcel_count': 1,
            'goods_value': Decimal('0.00'),
            'shipping_fee': Decimal('10.00'),
            'shipping_fee_currency': 'USD',
            'shipping_fee_payment_method': 'collect',
        }
        data.update(kwargs)
        return Shipment.objects.create(created_by=user, **data)

    @staticmethod
    def create_trip(user=None, vehicle=None, **kwargs):
        """Create a test trip without stations"""
        vehicle = vehicle or TestDataFactory.create_vehicle()
        data = {
            'trip_name': f'Trip_{TestDataFactory.random_string(5)}',
            'vehicle': vehicle,
            'vehicle_number': vehicle.vehicle_number,
            'destination': 'Aleppo',
            'owner_name': vehicle.owner_name,
        }
        data.update(kwargs)
        return Trip.objects.create(created_by=user, **data)

    @staticmethod
    def create_station(trip, driver=None, station_name=None, commission_percentage=Decimal('10.00'), order_index=0):
        """Create a trip station"""
        driver = driver or TestDataFactory.create_driver()
        return TripStation.objects.create(
            trip=trip,
            order_index=order_index,
            station_name=station_name or f'Station_{TestDataFactory.random_string(4)}',
            driver=driver,
            driver_name=driver.driver_name,
            commission_percentage=commission_percentage
        )

    @staticmethod
    def create_branch_entry(user=None, branch=None, entry_type='incoming', items=None):
        """
        Create a branch entry. items is a list of dicts of BranchEntryItem
        fields; one item of quantity 5 is created when omitted.
        """
        branch = branch or TestDataFactory.create_branch()
        entry = BranchEntry.objects.create(branch=branch, entry_type=entry_type, created_by=user)
        if items is None:
            items = [{'item_description': 'Boxes', 'item_quantity': 5}]
        for index, item_data in enumerate(items):
            BranchEntryItem.objects.create(entry=entry, order_index=index, **item_data)
        return entry

    @staticmethod
    def create_transaction(user=None, transaction_type='income', amount=Decimal('100.00'), currency='USD',
                           customer=None, **kwargs):
        """Create a journal transaction"""
        return FinancialTransaction.objects.create(
            transaction_type=transaction_type,
            amount=amount,
            currency=currency,
            description=kwargs.pop('description', 'Test transaction'),
            customer=customer,
            created_by=user,
            **kwargs
        )

    @staticmethod
    def create_transfer(user=None, from_branch=None, to_branch=None, amount=Decimal('50.00'), currency='USD',
                        transfer_type='send', **kwargs):
        """Create a branch transfer"""
        return BranchTransfer.objects.create(
            from_branch=from_branch or TestDataFactory.create_branch(),
            to_branch=to_branch or TestDataFactory.create_branch(),
            amount=amount,
            currency=currency,
            transfer_type=transfer_type,
            description=kwargs.pop('description', 'Test transfer'),
            created_by=user,
            **kwargs
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
