import random
from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from faker import Faker

from ...models import (
    AuditLog, Broker, BrokerDue, Contract, Customer, Installment, Partner,
    PartnerDebt, PartnerGroup, PartnerGroupMember, Safe, Transfer, Unit,
    UnitPartner, Voucher
)
from ...services import (
    BrokerService, ContractService, InstallmentService, PartnerService,
    TreasuryService, UnitService
)


class Command(BaseCommand):
    help = 'يولد بيانات تجريبية للنظام'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fake = Faker('ar_EG')

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='حذف البيانات الموجودة قبل إنشاء البيانات الجديدة'
        )
        parser.add_argument(
            '--units',
            type=int,
            default=12,
            help='عدد الوحدات التجريبية'
        )
        parser.add_argument(
            '--seed',
            type=int,
            default=None,
            help='قيمة ثابتة للمولد العشوائي'
        )

    def handle(self, *args, **options):
        if options['seed'] is not None:
            random.seed(options['seed'])
            Faker.seed(options['seed'])

        if options['clear']:
            self.stdout.write(self.style.WARNING('جاري حذف البيانات الموجودة...'))
            self._clear_data()

        self.stdout.write(self.style.SUCCESS('جاري إنشاء البيانات التجريبية...'))

        with transaction.atomic():
            partners = self._create_partners()
            self.stdout.write(self.style.SUCCESS(f'✓ تم إنشاء {len(partners)} شريك'))

            groups = self._create_partner_groups(partners)
            self.stdout.write(self.style.SUCCESS(f'✓ تم إنشاء {len(groups)} مجموعة شركاء'))

            safes = self._create_safes()
            self.stdout.write(self.style.SUCCESS(f'✓ تم إنشاء {len(safes)} خزينة'))

            customers = self._create_customers()
            self.stdout.write(self.style.SUCCESS(f'✓ تم إنشاء {len(customers)} عميل'))

            brokers = self._create_brokers()
            self.stdout.write(self.style.SUCCESS(f'✓ تم إنشاء {len(brokers)} سمسار'))

            units = self._create_units(groups, options['units'])
            self.stdout.write(self.style.SUCCESS(f'✓ تم إنشاء {len(units)} وحدة'))

            contracts = self._create_contracts(customers, units, safes, brokers)
            self.stdout.write(self.style.SUCCESS(f'✓ تم إنشاء {len(contracts)} عقد'))

            payments = self._create_payments(contracts, safes)
            self.stdout.write(self.style.SUCCESS(f'✓ تم تسجيل {payments} دفعة'))

        self.stdout.write(self.style.SUCCESS('\n✅ تم إنشاء البيانات التجريبية بنجاح!'))

    def _clear_data(self):
        """حذف البيانات الموجودة"""
        models = [
            Voucher, Transfer, BrokerDue, PartnerDebt, Installment, Contract,
            UnitPartner, Unit, Customer, Broker, Safe, PartnerGroupMember,
            PartnerGroup, Partner, AuditLog
        ]

        for model in models:
            model.objects.all().delete()

    def _create_partners(self):
        """إنشاء الشركاء"""
        partner_names = ['أحمد محمد', 'سارة أحمد', 'محمد علي', 'فاطمة عبدالله']
        return [
            PartnerService.create_partner(name, phone=self.fake.phone_number())
            for name in partner_names
        ]

    def _create_partner_groups(self, partners):
        """إنشاء مجموعات الشركاء"""
        groups = [
            PartnerService.create_group(
                'مجموعة الشركاء الرئيسية',
                [(partner, Decimal('25')) for partner in partners]
            )
        ]
        if len(partners) >= 2:
            groups.append(PartnerService.create_group(
                'مجموعة المشروع الخاص',
                [(partners[0], Decimal('60')), (partners[1], Decimal('40'))]
            ))
        return groups

    def _create_safes(self):
        """إنشاء الخزائن"""
        safe_data = [
            ('الخزنة الرئيسية', Decimal('500000')),
            ('خزنة الفرع', Decimal('100000')),
            ('الخزنة الاحتياطية', Decimal('50000')),
        ]
        return [TreasuryService.create_safe(name, balance) for name, balance in safe_data]

    def _create_customers(self):
        """إنشاء العملاء"""
        customers = []
        for _ in range(10):
            customers.append(Customer.objects.create(
                name=self.fake.name(),
                phone=self.fake.phone_number(),
                national_id=str(random.randint(10 ** 13, 10 ** 14 - 1)),
                address=self.fake.address() if random.choice([True, False]) else '',
                status=random.choice(['active', 'active', 'active', 'inactive'])
            ))
        return customers

    def _create_brokers(self):
        return [
            BrokerService.create_broker(self.fake.name(), phone=self.fake.phone_number())
            for _ in range(2)
        ]

    def _create_units(self, groups, count):
        """إنشاء الوحدات"""
        units = []
        buildings = ['A', 'B', 'C']
        unit_types = ['سكني', 'سكني', 'تجاري', 'إداري']

        for i in range(count):
            units.append(UnitService.create_unit(
                name=f'شقة {i + 1}',
                floor=str(i % 6 + 1),
                building=buildings[i % len(buildings)],
                total_price=Decimal(random.randrange(600000, 2500000, 10000)),
                area=str(random.randrange(90, 220, 5)),
                unit_type=random.choice(unit_types),
                partner_group=random.choice(groups),
            ))
        return units

    def _create_contracts(self, customers, units, safes, brokers):
        """إنشاء العقود والأقساط"""
        contracts = []
        today = timezone.localdate()

        for unit in units[:len(units) * 2 // 3]:
            total = unit.total_price
            broker = random.choice(brokers + [None])
            contracts.append(ContractService.create_contract(
                unit=unit,
                customer=random.choice(customers),
                start_date=today - timedelta(days=random.randint(30, 400)),
                down_payment=(total * Decimal(random.choice([10, 15, 20, 25])) / 100).quantize(Decimal('1')),
                maintenance_deposit=(total * Decimal('0.05')).quantize(Decimal('1')),
                cadence=random.choice(['monthly', 'quarterly', 'semiannual']),
                installments_count=random.choice([12, 24, 36]),
                broker_name=broker.name if broker else '',
                broker_percent=Decimal('1.5') if broker else Decimal('0'),
                commission_safe=safes[0] if broker else None,
                down_payment_safe=random.choice(safes),
            ))
        return contracts

    def _create_payments(self, contracts, safes):
        """تسجيل دفعات على الأقساط المستحقة"""
        today = timezone.localdate()
        payments = 0

        for contract in contracts:
            due = contract.installments.filter(due_date__lte=today).order_by('due_date')
            for installment in due[:random.randint(0, due.count())]:
                InstallmentService.process_payment(
                    unit=contract.unit,
                    amount=installment.amount,
                    payment_date=installment.due_date,
                    safe=random.choice(safes),
                    installment=installment,
                )
                payments += 1
        return payments
