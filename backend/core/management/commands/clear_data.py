"""
Management command to clear operational data (shipments, trips, branch entries,
ledgers and audit logs). Users, branches, vehicles, drivers and customers stay.
Usage: python manage.py clear_data
"""
from django.core.management.base import BaseCommand
from django.db import transaction
from backend.core.models import AuditLog, Counter
from backend.finance.models import CommissionPayment, BranchTransfer, FinancialTransaction
from backend.inventory.models import DispatchRecord, TripDispatchItem, BranchEntryItem, BranchEntry
from backend.shipments.models import ShipmentStatusUpdate, Shipment
from backend.trips.models import TripStation, Trip


class Command(BaseCommand):
    help = 'Clear shipments, trips, branch entries, ledgers and audit logs from database'

    def add_arguments(self, parser):
        parser.add_argument(
            '--confirm',
            action='store_true',
            help='Skip confirmation prompt',
        )
        parser.add_argument(
            '--keep-counters',
            action='store_true',
            help='Do not reset the SH-/TR- reference counters',
        )

    def handle(self, *args, **options):
        if not options['confirm']:
            self.stdout.write(self.style.WARNING('WARNING: This will delete ALL:'))
            self.stdout.write('  - Shipments (and their status history)')
            self.stdout.write('  - Trips (and stations, dispatched items)')
            self.stdout.write('  - Branch entries (and items, dispatch history)')
            self.stdout.write('  - Financial transactions, branch transfers, commission payments')
            self.stdout.write('  - Audit Logs (history)')
            self.stdout.write('')

            confirm = input('Type "YES" to confirm: ')
            if confirm != 'YES':
                self.stdout.write(self.style.ERROR('Operation cancelled.'))
                return

        self.stdout.write('Starting data cleanup...')

        # Children before parents
        steps = [
            ('Commission Payments', CommissionPayment),
            ('Branch Transfers', BranchTransfer),
            ('Financial Transactions', FinancialTransaction),
            ('Dispatch Records', DispatchRecord),
            ('Trip Dispatch Items', TripDispatchItem),
            ('Branch Entry Items', BranchEntryItem),
            ('Branch Entries', BranchEntry),
            ('Shipment Status Updates', ShipmentStatusUpdate),
            ('Shipments', Shipment),
            ('Trip Stations', TripStation),
            ('Trips', Trip),
            ('Audit Logs', AuditLog),
        ]
        if not options['keep_counters']:
            steps.append(('Counters', Counter))

        try:
            with transaction.atomic():
                for label, model in steps:
                    deleted, _ = model.objects.all().delete()
                    self.stdout.write(self.style.SUCCESS(f'  Deleted {label}: {deleted}'))
        except Exception as e:
            self.stdout.write(self.style.ERROR(f'Error during cleanup: {str(e)}'))
            raise

        self.stdout.write(self.style.SUCCESS('\nData cleanup completed successfully.'))
