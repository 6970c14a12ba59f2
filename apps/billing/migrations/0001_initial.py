# Generated manually for the billing app

import uuid
from decimal import Decimal
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Counter',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=50, unique=True)),
                ('count', models.PositiveBigIntegerField(default=0)),
                ('last_updated', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'db_table': 'counters',
            },
        ),
        migrations.CreateModel(
            name='Bill',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('receipt_no', models.PositiveBigIntegerField(unique=True)),
                ('member_id', models.CharField(db_index=True, max_length=20, validators=[django.core.validators.RegexValidator(message='Member ID must be in format: ward/house (e.g., 1/2)', regex='^\\d+/\\d+$')])),
                ('member_name', models.CharField(max_length=150)),
                ('member_address', models.TextField(blank=True)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('amount_in_words', models.CharField(max_length=255)),
                ('category', models.CharField(choices=[('Jamaath', 'Jamaath'), ('Madrassa', 'Madrassa'), ('Land', 'Land'), ('Nercha', 'Nercha'), ('Sadhu', 'Sadhu')], max_length=20)),
                ('account_type', models.CharField(max_length=50)),
                ('status', models.CharField(choices=[('Paid', 'Paid'), ('Pending', 'Pending'), ('Cancelled', 'Cancelled')], default='Paid', max_length=20)),
                ('payment_method', models.CharField(choices=[('Cash', 'Cash'), ('Card', 'Card'), ('UPI', 'UPI'), ('Bank Transfer', 'Bank Transfer'), ('Cheque', 'Cheque')], default='Cash', max_length=20)),
                ('payment_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('year', models.PositiveSmallIntegerField()),
                ('month', models.PositiveSmallIntegerField()),
                ('financial_year', models.CharField(db_index=True, max_length=7)),
                ('notes', models.TextField(blank=True, max_length=500)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('cancel_reason', models.CharField(blank=True, max_length=500)),
                ('is_active', models.BooleanField(default=True)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bills_created', to=settings.AUTH_USER_MODEL)),
                ('cancelled_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bills_cancelled', to=settings.AUTH_USER_MODEL)),
                ('deleted_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bills_deleted', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'bills',
                'ordering': ['-receipt_no'],
                'indexes': [
                    models.Index(fields=['member_id', 'payment_date'], name='bills_member_date_idx'),
                    models.Index(fields=['category', 'account_type'], name='bills_category_type_idx'),
                    models.Index(fields=['status', 'is_active'], name='bills_status_active_idx'),
                    models.Index(fields=['payment_date'], name='bills_payment_date_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(amount__gte=0), name='bills_amount_non_negative'),
                ],
            },
        ),
    ]
