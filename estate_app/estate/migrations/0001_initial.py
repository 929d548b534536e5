import datetime
from decimal import Decimal

import django.core.serializers.json
import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('timestamp', models.DateTimeField(auto_now_add=True, verbose_name='التوقيت')),
                ('description', models.CharField(max_length=255, verbose_name='الوصف')),
                ('details', models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder, verbose_name='التفاصيل')),
            ],
            options={
                'verbose_name': 'سجل عملية',
                'verbose_name_plural': 'سجل العمليات',
                'ordering': ['-timestamp', '-id'],
            },
        ),
        migrations.CreateModel(
            name='Broker',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, unique=True, verbose_name='اسم السمسار')),
                ('phone', models.CharField(blank=True, default='', max_length=20, verbose_name='رقم الهاتف')),
                ('notes', models.TextField(blank=True, default='', verbose_name='ملاحظات')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الإنشاء')),
            ],
            options={
                'verbose_name': 'سمسار',
                'verbose_name_plural': 'السماسرة',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Customer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, verbose_name='اسم العميل')),
                ('phone', models.CharField(blank=True, default='', max_length=20, validators=[django.core.validators.RegexValidator(message='رقم الهاتف يجب أن يحتوي على أرقام فقط', regex='^[0-9+\\-\\s]*$')], verbose_name='رقم الهاتف')),
                ('national_id', models.CharField(blank=True, default='', max_length=20, verbose_name='الرقم القومي')),
                ('address', models.TextField(blank=True, default='', verbose_name='العنوان')),
                ('status', models.CharField(choices=[('active', 'نشط'), ('inactive', 'غير نشط')], default='active', max_length=10, verbose_name='الحالة')),
                ('notes', models.TextField(blank=True, default='', verbose_name='ملاحظات')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الإنشاء')),
            ],
            options={
                'verbose_name': 'عميل',
                'verbose_name_plural': 'العملاء',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Partner',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, verbose_name='اسم الشريك')),
                ('phone', models.CharField(blank=True, default='', max_length=20, verbose_name='رقم الهاتف')),
                ('notes', models.TextField(blank=True, default='', verbose_name='ملاحظات')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الإنشاء')),
            ],
            options={
                'verbose_name': 'شريك',
                'verbose_name_plural': 'الشركاء',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='PartnerGroup',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, unique=True, verbose_name='اسم المجموعة')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الإنشاء')),
            ],
            options={
                'verbose_name': 'مجموعة شركاء',
                'verbose_name_plural': 'مجموعات الشركاء',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Safe',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, unique=True, verbose_name='اسم الخزنة')),
                ('opening_balance', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=15, verbose_name='الرصيد الافتتاحي')),
                ('balance', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=15, verbose_name='الرصيد الحالي')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الإنشاء')),
            ],
            options={
                'verbose_name': 'خزنة',
                'verbose_name_plural': 'الخزائن',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Unit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=175, unique=True, verbose_name='كود الوحدة')),
                ('name', models.CharField(max_length=100, verbose_name='اسم الوحدة')),
                ('floor', models.CharField(max_length=20, verbose_name='رقم الدور')),
                ('building', models.CharField(max_length=50, verbose_name='البرج/العمارة')),
                ('area', models.CharField(blank=True, default='', max_length=20, verbose_name='المساحة (م²)')),
                ('unit_type', models.CharField(default='سكني', max_length=50, verbose_name='نوع الوحدة')),
                ('total_price', models.DecimalField(decimal_places=2, max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='السعر الكلي')),
                ('status', models.CharField(choices=[('available', 'متاحة'), ('reserved', 'محجوزة'), ('sold', 'مباعة'), ('returned', 'مرتجعة')], default='available', max_length=10, verbose_name='الحالة')),
                ('notes', models.TextField(blank=True, default='', verbose_name='ملاحظات')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الإنشاء')),
            ],
            options={
                'verbose_name': 'وحدة',
                'verbose_name_plural': 'الوحدات',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['status'], name='estate_unit_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='Contract',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=20, unique=True, verbose_name='كود العقد')),
                ('total_price', models.DecimalField(decimal_places=2, max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='السعر الكلي')),
                ('discount_amount', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0'))], verbose_name='الخصم')),
                ('down_payment', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0'))], verbose_name='المقدم')),
                ('maintenance_deposit', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0'))], verbose_name='وديعة الصيانة')),
                ('payment_type', models.CharField(choices=[('installment', 'تقسيط'), ('cash', 'كاش')], default='installment', max_length=20, verbose_name='طريقة السداد')),
                ('broker_name', models.CharField(blank=True, default='', max_length=200, verbose_name='اسم السمسار')),
                ('broker_percent', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0')), django.core.validators.MaxValueValidator(Decimal('100'))], verbose_name='نسبة العمولة %')),
                ('broker_amount', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=15, verbose_name='مبلغ العمولة')),
                ('cadence', models.CharField(choices=[('monthly', 'شهري'), ('quarterly', 'ربع سنوي'), ('semiannual', 'نصف سنوي'), ('annual', 'سنوي')], default='monthly', max_length=20, verbose_name='نظام الأقساط')),
                ('installments_count', models.PositiveIntegerField(default=0, verbose_name='عدد الدفعات')),
                ('extra_annual', models.PositiveSmallIntegerField(default=0, validators=[django.core.validators.MaxValueValidator(3)], verbose_name='عدد الدفعات السنوية')),
                ('annual_payment_value', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0'))], verbose_name='قيمة الدفعة السنوية')),
                ('start_date', models.DateField(verbose_name='تاريخ البدء')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الإنشاء')),
                ('commission_safe', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='commission_contracts', to='estate.safe', verbose_name='خزنة العمولة')),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='contracts', to='estate.customer', verbose_name='العميل')),
                ('unit', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='contract', to='estate.unit', verbose_name='الوحدة')),
            ],
            options={
                'verbose_name': 'عقد',
                'verbose_name_plural': 'العقود',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['start_date'], name='estate_contract_start_idx')],
            },
        ),
        migrations.CreateModel(
            name='BrokerDue',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('broker_name', models.CharField(max_length=200, verbose_name='اسم السمسار')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=15, verbose_name='المبلغ')),
                ('due_date', models.DateField(verbose_name='تاريخ الاستحقاق')),
                ('status', models.CharField(choices=[('due', 'مستحقة'), ('paid', 'مدفوعة')], default='due', max_length=10, verbose_name='الحالة')),
                ('payment_date', models.DateField(blank=True, null=True, verbose_name='تاريخ الدفع')),
                ('broker', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='dues', to='estate.broker', verbose_name='السمسار')),
                ('contract', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='broker_dues', to='estate.contract', verbose_name='العقد')),
                ('paid_from_safe', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='paid_broker_dues', to='estate.safe', verbose_name='دفعت من خزنة')),
            ],
            options={
                'verbose_name': 'عمولة سمسار',
                'verbose_name_plural': 'عمولات السماسرة',
                'ordering': ['due_date', 'id'],
            },
        ),
        migrations.CreateModel(
            name='Installment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('kind', models.CharField(choices=[('regular', 'قسط'), ('annual', 'دفعة سنوية'), ('maintenance', 'دفعة صيانة')], default='regular', max_length=20, verbose_name='النوع')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=15, verbose_name='المتبقي')),
                ('original_amount', models.DecimalField(decimal_places=2, max_digits=15, verbose_name='المبلغ الأصلي')),
                ('due_date', models.DateField(verbose_name='تاريخ الاستحقاق')),
                ('payment_date', models.DateField(blank=True, null=True, verbose_name='تاريخ السداد')),
                ('status', models.CharField(choices=[('unpaid', 'غير مدفوع'), ('partial', 'مدفوع جزئياً'), ('paid', 'مدفوع')], default='unpaid', max_length=10, verbose_name='الحالة')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الإنشاء')),
                ('contract', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='installments', to='estate.contract', verbose_name='العقد')),
                ('unit', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='installments', to='estate.unit', verbose_name='الوحدة')),
            ],
            options={
                'verbose_name': 'قسط',
                'verbose_name_plural': 'الأقساط',
                'ordering': ['due_date', 'id'],
                'indexes': [
                    models.Index(fields=['unit', 'status'], name='estate_inst_unit_status_idx'),
                    models.Index(fields=['due_date'], name='estate_inst_due_date_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PartnerDebt',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=15, verbose_name='المبلغ')),
                ('due_date', models.DateField(verbose_name='تاريخ الاستحقاق')),
                ('status', models.CharField(choices=[('unpaid', 'غير مدفوع'), ('paid', 'مدفوع')], default='unpaid', max_length=10, verbose_name='الحالة')),
                ('payment_date', models.DateField(blank=True, null=True, verbose_name='تاريخ السداد')),
                ('owed_partner', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='debts_owed', to='estate.partner', verbose_name='الشريك المستحق')),
                ('paying_partner', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='debts_to_pay', to='estate.partner', verbose_name='الشريك الدافع')),
                ('unit', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='partner_debts', to='estate.unit', verbose_name='الوحدة')),
            ],
            options={
                'verbose_name': 'دين شريك',
                'verbose_name_plural': 'ديون الشركاء',
                'ordering': ['due_date', 'id'],
                'indexes': [models.Index(fields=['status'], name='estate_pdebt_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='PartnerGroupMember',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('percent', models.DecimalField(decimal_places=2, max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0.01')), django.core.validators.MaxValueValidator(Decimal('100'))], verbose_name='النسبة في المجموعة %')),
                ('group', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='members', to='estate.partnergroup', verbose_name='المجموعة')),
                ('partner', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='group_memberships', to='estate.partner', verbose_name='الشريك')),
            ],
            options={
                'verbose_name': 'عضو مجموعة',
                'verbose_name_plural': 'أعضاء المجموعة',
                'ordering': ['group', '-percent'],
                'unique_together': {('group', 'partner')},
            },
        ),
        migrations.CreateModel(
            name='Transfer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='المبلغ')),
                ('date', models.DateField(default=datetime.date.today, verbose_name='التاريخ')),
                ('notes', models.TextField(blank=True, default='', verbose_name='ملاحظات')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الإنشاء')),
                ('from_safe', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transfers_out', to='estate.safe', verbose_name='من خزنة')),
                ('to_safe', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transfers_in', to='estate.safe', verbose_name='إلى خزنة')),
            ],
            options={
                'verbose_name': 'تحويل',
                'verbose_name_plural': 'التحويلات',
                'ordering': ['-date', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='UnitPartner',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('percent', models.DecimalField(decimal_places=2, max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0.01')), django.core.validators.MaxValueValidator(Decimal('100'))], verbose_name='النسبة %')),
                ('partner', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='unit_links', to='estate.partner', verbose_name='الشريك')),
                ('unit', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='partner_links', to='estate.unit', verbose_name='الوحدة')),
            ],
            options={
                'verbose_name': 'شريك وحدة',
                'verbose_name_plural': 'شركاء الوحدات',
                'ordering': ['unit', '-percent'],
                'unique_together': {('unit', 'partner')},
            },
        ),
        migrations.CreateModel(
            name='Voucher',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('voucher_number', models.CharField(max_length=20, unique=True, verbose_name='رقم السند')),
                ('type', models.CharField(choices=[('receipt', 'قبض'), ('payment', 'صرف')], max_length=10, verbose_name='نوع السند')),
                ('date', models.DateField(default=datetime.date.today, verbose_name='التاريخ')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='المبلغ')),
                ('description', models.TextField(verbose_name='البيان')),
                ('party', models.CharField(blank=True, default='', max_length=200, verbose_name='الدافع/المستفيد')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الإنشاء')),
                ('broker_due', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='vouchers', to='estate.brokerdue', verbose_name='عمولة السمسار')),
                ('contract', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='vouchers', to='estate.contract', verbose_name='العقد')),
                ('installment', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='vouchers', to='estate.installment', verbose_name='القسط')),
                ('safe', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='vouchers', to='estate.safe', verbose_name='الخزنة')),
                ('unit', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='vouchers', to='estate.unit', verbose_name='الوحدة')),
            ],
            options={
                'verbose_name': 'سند',
                'verbose_name_plural': 'السندات',
                'ordering': ['-date', '-created_at'],
                'indexes': [
                    models.Index(fields=['date'], name='estate_voucher_date_idx'),
                    models.Index(fields=['type'], name='estate_voucher_type_idx'),
                ],
            },
        ),
    ]
