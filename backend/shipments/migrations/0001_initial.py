# Generated manually
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models

CURRENCY_CHOICES = [('USD', 'US Dollar'), ('TRY', 'Turkish Lira'), ('SYP', 'Syrian Pound')]
PAYMENT_METHOD_CHOICES = [('collect', 'Collect On Delivery'), ('prepaid', 'Prepaid')]
STATUS_CHOICES = [
    ('received', 'تم الاستلام من المرسل'),
    ('pending', 'معلق'),
    ('in_transit', 'قيد النقل'),
    ('arrived', 'وصلت الوجهة'),
    ('delivered', 'تم التسليم'),
    ('returned', 'مرتجع'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('fleet', '0001_initial'),
        ('trips', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Shipment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('shipment_number', models.CharField(editable=False, max_length=20, unique=True)),
                ('recipient_name', models.CharField(max_length=200)),
                ('recipient_phone', models.CharField(blank=True, db_index=True, max_length=30)),
                ('sender_name', models.CharField(blank=True, max_length=200)),
                ('sender_phone', models.CharField(blank=True, db_index=True, max_length=30)),
                ('governorate', models.CharField(blank=True, max_length=100)),
                ('parcel_count', models.PositiveIntegerField(default=1)),
                ('parcel_type', models.CharField(blank=True, max_length=100)),
                ('courier_name', models.CharField(blank=True, max_length=200)),
                ('weight', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('notes', models.TextField(blank=True)),
                ('goods_value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('goods_currency', models.CharField(choices=CURRENCY_CHOICES, default='USD', max_length=3)),
                ('shipping_fee', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('shipping_fee_currency', models.CharField(choices=CURRENCY_CHOICES, default='USD', max_length=3)),
                ('shipping_fee_payment_method', models.CharField(choices=PAYMENT_METHOD_CHOICES, default='collect', max_length=10)),
                ('hwala_fee', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('hwala_fee_currency', models.CharField(choices=CURRENCY_CHOICES, default='USD', max_length=3)),
                ('hwala_fee_payment_method', models.CharField(choices=PAYMENT_METHOD_CHOICES, default='collect', max_length=10)),
                ('internal_transfer_fee', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('internal_transfer_fee_currency', models.CharField(choices=CURRENCY_CHOICES, default='USD', max_length=3)),
                ('custom_fee1_name', models.CharField(blank=True, max_length=100)),
                ('custom_fee1_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('custom_fee1_currency', models.CharField(choices=CURRENCY_CHOICES, default='USD', max_length=3)),
                ('custom_fee2_name', models.CharField(blank=True, max_length=100)),
                ('custom_fee2_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('custom_fee2_currency', models.CharField(choices=CURRENCY_CHOICES, default='USD', max_length=3)),
                ('status', models.CharField(choices=STATUS_CHOICES, db_index=True, default='received', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='shipments_created', to=settings.AUTH_USER_MODEL)),
                ('station', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='shipments', to='trips.tripstation')),
                ('trip', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='shipments', to='trips.trip')),
                ('vehicle', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='shipments', to='fleet.vehicle')),
            ],
            options={
                'db_table': 'shipments',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='ShipmentStatusUpdate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=STATUS_CHOICES, max_length=20)),
                ('location', models.CharField(blank=True, max_length=200)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='shipment_status_updates', to=settings.AUTH_USER_MODEL)),
                ('shipment', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='status_updates', to='shipments.shipment')),
            ],
            options={
                'db_table': 'shipment_status_updates',
                'ordering': ['created_at', 'id'],
            },
        ),
    ]
