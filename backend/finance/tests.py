"""
Tests for the daily journal, debts, branch transfers and driver commissions
"""
import datetime
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.finance.commissions import (
    commission_totals, compute_commissions, driver_summary, set_commission_status, station_commission_rows
)
from backend.finance.ledger import customer_statement, debts_summary, journal_stats, net_totals
from backend.finance.models import BranchTransfer, CommissionPayment, FinancialTransaction
from backend.shipments.status import DELIVERED


class JournalTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()

    def test_references_are_sequential(self):
        first = TestDataFactory.create_transaction(self.user)
        second = TestDataFactory.create_transaction(self.user)
        self.assertEqual(first.reference, 'SH-00001')
        self.assertEqual(second.reference, 'SH-00002')

    def test_customer_snapshot(self):
        customer = TestDataFactory.create_customer(name='Yara', phone='0912345678', customer_type='sender')
        transaction = TestDataFactory.create_transaction(self.user, 'debt', customer=customer)
        self.assertEqual(transaction.customer_name, 'Yara')
        self.assertEqual(transaction.customer_phone, '0912345678')
        self.assertEqual(transaction.customer_role, 'sender')

    def test_net_per_currency(self):
        TestDataFactory.create_transaction(self.user, 'debt', Decimal('100.00'), 'USD')
        TestDataFactory.create_transaction(self.user, 'payment', Decimal('30.00'), 'USD')
        TestDataFactory.create_transaction(self.user, 'income', Decimal('999.00'), 'USD')
        TestDataFactory.create_transaction(self.user, 'payment', Decimal('500.00'), 'TRY')
        net = net_totals(FinancialTransaction.objects.all())
        self.assertEqual(net, {'USD': Decimal('70.00'), 'TRY': Decimal('-500.00')})

    def test_cash_net_per_currency(self):
        TestDataFactory.create_transaction(self.user, 'income', Decimal('100.00'), 'USD')
        TestDataFactory.create_transaction(self.user, 'expense', Decimal('30.00'), 'USD')
        TestDataFactory.create_transaction(self.user, 'debt', Decimal('40.00'), 'USD')
        stats = journal_stats(FinancialTransaction.objects.all())
        self.assertEqual(stats['cash_net'], {'USD': Decimal('70.00')})
        self.assertEqual(stats['net'], {'USD': Decimal('40.00')})
        self.assertEqual(stats['today_net'], {'USD': Decimal('40.00')})

    def test_journal_stats_counts(self):
        TestDataFactory.create_transaction(self.user)
        TestDataFactory.create_transaction(self.user, date=timezone.localdate() - datetime.timedelta(days=400))
        stats = journal_stats(FinancialTransaction.objects.all())
        self.assertEqual(stats['today_count'], 1)
        self.assertEqual(stats['month_count'], 1)
        self.assertEqual(stats['total_count'], 2)
        self.assertEqual(stats['totals_by_type']['income'], {'USD': Decimal('200.00')})

    def test_debts_summary_sorted_by_balance(self):
        small = TestDataFactory.create_customer(name='Small')
        large = TestDataFactory.create_customer(name='Large')
        TestDataFactory.create_transaction(self.user, 'debt', Decimal('50.00'), customer=small)
        TestDataFactory.create_transaction(self.user, 'debt', Decimal('300.00'), customer=large)
        TestDataFactory.create_transaction(self.user, 'payment', Decimal('100.00'), customer=large)
        TestDataFactory.create_transaction(self.user, 'income', Decimal('999.00'), customer=large)

        rows = debts_summary(FinancialTransaction.objects.all())
        self.assertEqual([r['customer_name'] for r in rows], ['Large', 'Small'])
        self.assertEqual(rows[0]['balance'], Decimal('200.00'))
        self.assertEqual(rows[0]['transactions_count'], 2)

        rows = debts_summary(FinancialTransaction.objects.all(), search='sma')
        self.assertEqual([r['customer_name'] for r in rows], ['Small'])

    def test_statement_running_balance(self):
        customer = TestDataFactory.create_customer()
        today = timezone.localdate()
        TestDataFactory.create_transaction(self.user, 'debt', Decimal('100.00'), customer=customer,
                                           date=today - datetime.timedelta(days=2))
        TestDataFactory.create_transaction(self.user, 'payment', Decimal('30.00'), customer=customer,
                                           date=today - datetime.timedelta(days=1))
        lines, balances = customer_statement(FinancialTransaction.objects.filter(customer=customer))
        self.assertEqual([line['balance'] for line in lines], [Decimal('100.00'), Decimal('70.00')])
        self.assertEqual(lines[1]['credit'], Decimal('30.00'))
        self.assertEqual(balances, {'USD': Decimal('70.00')})


class JournalAPITests(TestCase):
    def setUp(self):
        self.admin = TestDataFactory.create_user(role='admin')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_employee_is_forbidden(self):
        employee = TestDataFactory.create_user(role='employee')
        self.client.authenticate_user(employee)
        for url in ('/api/v1/transactions/', '/api/v1/debts/', '/api/v1/transfers/', '/api/v1/commissions/'):
            response = self.client.get(url)
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
            self.assertEqual(response.data['error'], 'Only Admin users can access finance')

    def test_create_transaction(self):
        branch = TestDataFactory.create_branch(name='Idlib')
        response = self.client.post('/api/v1/transactions/', {
            'transaction_type': 'income',
            'amount': '75.50',
            'currency': 'TRY',
            'description': 'Shipping fees',
            'branch': branch.pk,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['reference'], 'SH-00001')
        self.assertEqual(response.data['branch_name'], 'Idlib')
        self.assertTrue(AuditLog.objects.filter(action='transaction_add').exists())

    def test_amount_must_be_positive(self):
        response = self.client.post('/api/v1/transactions/', {
            'transaction_type': 'income', 'amount': '0', 'description': 'Nothing'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('amount', response.data)

    def test_filter_and_stats(self):
        TestDataFactory.create_transaction(self.admin, 'income', Decimal('10.00'))
        TestDataFactory.create_transaction(self.admin, 'expense', Decimal('4.00'))
        response = self.client.get('/api/v1/transactions/', {'transaction_type': 'expense'})
        self.assertEqual(len(response.data), 1)

        response = self.client.get('/api/v1/transactions/stats/')
        self.assertEqual(response.data['cash_net'], {'USD': '6.00'})
        self.assertEqual(response.data['net'], {})
        self.assertEqual(response.data['today_count'], 2)

    def test_debts_and_statement_endpoints(self):
        customer = TestDataFactory.create_customer(name='Basel')
        TestDataFactory.create_transaction(self.admin, 'debt', Decimal('80.00'), customer=customer)
        response = self.client.get('/api/v1/debts/')
        self.assertEqual(response.data[0]['balance'], '80.00')

        response = self.client.get(f'/api/v1/debts/customers/{customer.pk}/statement/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['balances'], {'USD': '80.00'})
        self.assertEqual(response.data['lines'][0]['debit'], '80.00')


class TransferTests(TestCase):
    def setUp(self):
        self.admin = TestDataFactory.create_user(role='admin')
        self.aleppo = TestDataFactory.create_branch(name='Aleppo')
        self.homs = TestDataFactory.create_branch(name='Homs')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_transfer(self):
        response = self.client.post('/api/v1/transfers/', {
            'from_branch': self.aleppo.pk,
            'to_branch': self.homs.pk,
            'amount': '250.00',
            'currency': 'USD',
            'description': 'Weekly settlement',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['transfer_number'], 'TR-00001')
        self.assertEqual(response.data['from_branch_name'], 'Aleppo')
        self.assertEqual(response.data['status'], 'pending')

    def test_same_branch_rejected(self):
        response = self.client.post('/api/v1/transfers/', {
            'from_branch': self.aleppo.pk,
            'to_branch': self.aleppo.pk,
            'amount': '10.00',
            'description': 'Loop',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('to_branch', response.data)

    def test_change_status(self):
        transfer = TestDataFactory.create_transfer(self.admin, self.aleppo, self.homs)
        response = self.client.post(f'/api/v1/transfers/{transfer.pk}/status/', {'status': 'confirmed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        transfer.refresh_from_db()
        self.assertEqual(transfer.status, 'confirmed')

    def test_stats_by_transfer_type(self):
        TestDataFactory.create_transfer(self.admin, self.aleppo, self.homs, Decimal('100.00'))
        TestDataFactory.create_transfer(self.admin, self.homs, self.aleppo, Decimal('40.00'), transfer_type='receive')
        TestDataFactory.create_transfer(self.admin, self.homs, self.aleppo, Decimal('5.00'), 'TRY',
                                        transfer_type='confirm', status='confirmed')
        response = self.client.get('/api/v1/transfers/stats/')
        self.assertEqual(response.data['total_sent'], {'USD': '100.00'})
        self.assertEqual(response.data['total_received'], {'USD': '40.00'})
        self.assertEqual(response.data['total_confirmed'], {'TRY': '5.00'})
        self.assertEqual(response.data['pending_count'], 2)
        self.assertEqual(response.data['total_count'], 3)

    def test_filter_by_branch_matches_either_side(self):
        damascus = TestDataFactory.create_branch(name='Damascus')
        TestDataFactory.create_transfer(self.admin, self.aleppo, self.homs)
        TestDataFactory.create_transfer(self.admin, self.homs, self.aleppo)
        TestDataFactory.create_transfer(self.admin, self.homs, damascus)
        response = self.client.get('/api/v1/transfers/', {'branch': self.aleppo.pk})
        self.assertEqual(len(response.data), 2)
        self.assertEqual(BranchTransfer.objects.count(), 3)


class CommissionTests(TestCase):
    def setUp(self):
        self.admin = TestDataFactory.create_user(role='admin')
        self.driver = TestDataFactory.create_driver(driver_name='Fadi')
        self.trip = TestDataFactory.create_trip(self.admin)
        self.station = TestDataFactory.create_station(self.trip, self.driver, station_name='Hama',
                                                      commission_percentage=Decimal('10.00'))
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_rows_per_currency(self):
        usd = TestDataFactory.create_shipment(self.admin, trip=self.trip, station=self.station,
                                              shipping_fee=Decimal('30.00'))
        syp = TestDataFactory.create_shipment(self.admin, trip=self.trip, station=self.station,
                                              shipping_fee=Decimal('1000.00'), shipping_fee_currency='SYP')
        TestDataFactory.create_shipment(self.admin, trip=self.trip, station=self.station,
                                        shipping_fee_payment_method='prepaid')
        rows = station_commission_rows(self.station)
        self.assertEqual([(r['currency'], r['commission_amount']) for r in rows],
                         [('SYP', Decimal('100.00')), ('USD', Decimal('3.00'))])
        self.assertEqual(rows[0]['shipments_count'], 2)
        self.assertEqual(sorted(rows[0]['shipment_ids']), sorted([usd.pk, syp.pk]))
        self.assertEqual(rows[0]['commission_id'], f'{self.trip.pk}-Hama-0')

    def test_station_without_fees_has_zero_row(self):
        rows = station_commission_rows(self.station)
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]['commission_amount'], Decimal('0.00'))
        self.assertEqual(rows[0]['status'], 'pending')

    def test_delivered_trip_defaults_to_paid(self):
        self.trip.status = DELIVERED
        self.trip.save()
        rows = compute_commissions()
        self.assertEqual(rows[0]['status'], 'paid')

    def test_saved_status_wins(self):
        self.trip.status = DELIVERED
        self.trip.save()
        set_commission_status(self.station, 'pending', user=self.admin)
        rows = compute_commissions()
        self.assertEqual(rows[0]['status'], 'pending')

    def test_totals_and_driver_summary(self):
        TestDataFactory.create_shipment(self.admin, trip=self.trip, station=self.station,
                                        shipping_fee=Decimal('50.00'))
        other_trip = TestDataFactory.create_trip(self.admin)
        other_station = TestDataFactory.create_station(other_trip, self.driver, commission_percentage=Decimal('20.00'))
        TestDataFactory.create_shipment(self.admin, trip=other_trip, station=other_station,
                                        shipping_fee=Decimal('10.00'))
        TestDataFactory.create_shipment(self.admin, trip=other_trip, station=other_station,
                                        shipping_fee_payment_method='prepaid')
        set_commission_status(other_station, 'paid', user=self.admin)

        rows = compute_commissions()
        totals = commission_totals(rows)
        self.assertEqual(totals['total'], {'USD': Decimal('7.00')})
        self.assertEqual(totals['paid'], {'USD': Decimal('2.00')})
        self.assertEqual(totals['pending'], {'USD': Decimal('5.00')})

        summary = driver_summary(rows)
        self.assertEqual(len(summary), 1)
        self.assertEqual(summary[0]['trip_count'], 2)
        self.assertEqual(summary[0]['shipment_count'], 2)

    def test_list_endpoint(self):
        TestDataFactory.create_shipment(self.admin, trip=self.trip, station=self.station)
        response = self.client.get('/api/v1/commissions/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['commissions'][0]['commission_amount'], '1.00')
        self.assertEqual(response.data['totals']['pending'], {'USD': '1.00'})
        self.assertEqual(response.data['drivers'][0]['driver_name'], 'Fadi')

    def test_list_filters_by_status(self):
        response = self.client.get('/api/v1/commissions/', {'status': 'paid'})
        self.assertEqual(response.data['commissions'], [])

    def test_malformed_date_filter_is_rejected(self):
        response = self.client.get('/api/v1/commissions/', {'date_from': '2024-02-30'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['field'], 'date_from')

        response = self.client.get('/api/v1/commissions/export/', {'date_to': 'yesterday'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['field'], 'date_to')

    def test_date_filter(self):
        today = timezone.localdate()
        response = self.client.get('/api/v1/commissions/', {'date_from': today.isoformat()})
        self.assertEqual(len(response.data['commissions']), 1)
        response = self.client.get('/api/v1/commissions/', {
            'date_to': (today - datetime.timedelta(days=1)).isoformat()
        })
        self.assertEqual(response.data['commissions'], [])

    def test_update_status_endpoint(self):
        response = self.client.post(f'/api/v1/commissions/{self.station.pk}/status/', {'status': 'paid'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'paid')
        payment = CommissionPayment.objects.get(station=self.station)
        self.assertIsNotNone(payment.payment_date)

        self.client.post(f'/api/v1/commissions/{self.station.pk}/status/', {'status': 'pending'}, format='json')
        payment.refresh_from_db()
        self.assertIsNone(payment.payment_date)
        self.assertEqual(CommissionPayment.objects.count(), 1)

    def test_export(self):
        response = self.client.get('/api/v1/commissions/export/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Disposition'], 'attachment; filename="driver_commissions.xlsx"')
