from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('ipd', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='InpatientBill',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('room_charges', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('procedure_charges', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('medicine_charges', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('lab_charges', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('other_charges', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('total_amount', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=14)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('PAID', 'Paid'), ('PARTIAL', 'Partially paid'), ('CANCELLED', 'Cancelled')], db_index=True, default='PENDING', max_length=16)),
                ('payment_mode', models.CharField(blank=True, choices=[('CASH', 'Cash'), ('CARD', 'Card'), ('UPI', 'UPI'), ('NET_BANKING', 'Net banking'), ('INSURANCE', 'Insurance')], max_length=16)),
                ('paid_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('admission', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bills', to='ipd.admission')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='inpatient_bills_created', to=settings.AUTH_USER_MODEL)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='inpatient_bills', to='ipd.patient')),
            ],
            options={
                'indexes': [models.Index(fields=['admission', 'created_at'], name='ipd_bill_admission_idx')],
            },
        ),
    ]
