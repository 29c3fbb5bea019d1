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
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Trip',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('trip_name', models.CharField(max_length=200)),
                ('source', models.CharField(choices=[('stations', 'Trip With Stations'), ('manifest', 'Manifest'), ('bulk_dispatch', 'Branch Bulk Dispatch')], default='stations', max_length=20)),
                ('vehicle_number', models.CharField(blank=True, max_length=50)),
                ('destination', models.CharField(blank=True, max_length=255)),
                ('destination_cities', models.JSONField(blank=True, default=list)),
                ('owner_name', models.CharField(blank=True, max_length=200)),
                ('departure_date', models.DateField(blank=True, null=True)),
                ('departure_time', models.TimeField(blank=True, null=True)),
                ('status', models.CharField(choices=[('pending', 'قيد الانتظار'), ('in_transit', 'قيد النقل'), ('delivered', 'تم التسليم')], db_index=True, default='pending', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('office_expenses', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('office_expenses_currency', models.CharField(choices=CURRENCY_CHOICES, default='USD', max_length=3)),
                ('car_expenses', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('car_expenses_currency', models.CharField(choices=CURRENCY_CHOICES, default='USD', max_length=3)),
                ('vehicle_rental', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('expense1_name', models.CharField(blank=True, max_length=200)),
                ('expense1_value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('expense1_currency', models.CharField(choices=CURRENCY_CHOICES, default='USD', max_length=3)),
                ('expense2_name', models.CharField(blank=True, max_length=200)),
                ('expense2_value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('expense2_currency', models.CharField(choices=CURRENCY_CHOICES, default='USD', max_length=3)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='trips_created', to=settings.AUTH_USER_MODEL)),
                ('vehicle', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='trips', to='fleet.vehicle')),
            ],
            options={
                'db_table': 'trips',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='TripStation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('order_index', models.PositiveIntegerField(default=0)),
                ('station_name', models.CharField(max_length=200)),
                ('driver_name', models.CharField(blank=True, max_length=200)),
                ('commission_percentage', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('driver', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='stations', to='fleet.driver')),
                ('trip', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stations', to='trips.trip')),
            ],
            options={
                'db_table': 'trip_stations',
                'ordering': ['trip', 'order_index'],
            },
        ),
    ]
