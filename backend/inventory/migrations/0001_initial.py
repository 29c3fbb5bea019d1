# Generated manually
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models

CURRENCY_CHOICES = [('USD', 'US Dollar'), ('TRY', 'Turkish Lira'), ('SYP', 'Syrian Pound')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('fleet', '0001_initial'),
        ('locations', '0001_initial'),
        ('trips', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='BranchEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('bol_number', models.CharField(max_length=30, unique=True)),
                ('entry_type', models.CharField(choices=[('incoming', 'Incoming'), ('outgoing', 'Outgoing')], db_index=True, default='incoming', max_length=10)),
                ('branch_name', models.CharField(blank=True, max_length=200)),
                ('notes', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('open', 'Open'), ('linked', 'Linked To Vehicle')], default='open', max_length=10)),
                ('vehicle_name', models.CharField(blank=True, max_length=100)),
                ('sender_name', models.CharField(blank=True, max_length=200)),
                ('converted_value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('converted_value_currency', models.CharField(choices=CURRENCY_CHOICES, default='USD', max_length=3)),
                ('percentage_share', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('vehicle_rental_fee', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('additional_fee', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('additional_fee_currency', models.CharField(choices=CURRENCY_CHOICES, default='USD', max_length=3)),
                ('additional_fee_payment_method', models.CharField(choices=[('prepaid', 'Prepaid'), ('collect', 'Collect On Delivery')], default='prepaid', max_length=10)),
                ('custom_fees', models.JSONField(blank=True, default=list)),
                ('link_notes', models.TextField(blank=True)),
                ('linked_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('branch', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='entries', to='locations.branch')),
                ('vehicle', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='branch_entries', to='fleet.vehicle')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='branch_entries', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'branch_entries',
                'ordering': ['-created_at'],
                'verbose_name_plural': 'Branch entries',
            },
        ),
        migrations.CreateModel(
            name='BranchEntryItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('order_index', models.PositiveIntegerField(default=0)),
                ('sending_branch_reference', models.CharField(blank=True, max_length=100)),
                ('item_description', models.CharField(max_length=255)),
                ('item_quantity', models.PositiveIntegerField(default=1)),
                ('dispatched_quantity', models.PositiveIntegerField(default=0)),
                ('item_weight', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('item_value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('item_currency', models.CharField(choices=CURRENCY_CHOICES, default='USD', max_length=3)),
                ('recipient_name', models.CharField(blank=True, max_length=200)),
                ('recipient_phone', models.CharField(blank=True, max_length=30)),
                ('destination_governorate', models.CharField(blank=True, max_length=100)),
                ('item_notes', models.TextField(blank=True)),
                ('item_status', models.CharField(choices=[('received', 'Received'), ('partially_dispatched', 'Partially Dispatched'), ('fully_dispatched', 'Fully Dispatched')], default='received', max_length=25)),
                ('entry', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='inventory.branchentry')),
                ('assigned_trip', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_branch_items', to='trips.trip')),
            ],
            options={
                'db_table': 'branch_entry_items',
                'ordering': ['entry', 'order_index'],
            },
        ),
        migrations.CreateModel(
            name='DispatchRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('dispatched_amount', models.PositiveIntegerField()),
                ('destination_type', models.CharField(choices=[('customer', 'Customer'), ('branch', 'Branch'), ('bulk_dispatch_trip', 'Bulk Dispatch Trip')], max_length=20)),
                ('customer_name', models.CharField(blank=True, max_length=200)),
                ('customer_phone', models.CharField(blank=True, max_length=30)),
                ('destination_governorate', models.CharField(blank=True, max_length=100)),
                ('target_branch_name', models.CharField(blank=True, max_length=200)),
                ('destination_cities', models.CharField(blank=True, max_length=255)),
                ('notes', models.TextField(blank=True)),
                ('dispatched_at', models.DateTimeField(auto_now_add=True)),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='dispatch_history', to='inventory.branchentryitem')),
                ('trip', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='dispatch_records', to='trips.trip')),
                ('recorded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='dispatch_records', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'dispatch_records',
                'ordering': ['dispatched_at', 'id'],
            },
        ),
        migrations.CreateModel(
            name='TripDispatchItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('bol_number', models.CharField(max_length=30)),
                ('order_index', models.PositiveIntegerField(default=0)),
                ('item_description', models.CharField(max_length=255)),
                ('quantity', models.PositiveIntegerField()),
                ('item_value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('item_currency', models.CharField(choices=CURRENCY_CHOICES, default='USD', max_length=3)),
                ('recipient_name', models.CharField(blank=True, max_length=200)),
                ('recipient_phone', models.CharField(blank=True, max_length=30)),
                ('destination_governorate', models.CharField(blank=True, max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('trip', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='dispatched_items', to='trips.trip')),
                ('source_item', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='trip_items', to='inventory.branchentryitem')),
            ],
            options={
                'db_table': 'trip_dispatch_items',
                'ordering': ['trip', 'id'],
            },
        ),
    ]
