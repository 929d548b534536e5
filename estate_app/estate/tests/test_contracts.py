from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from ..models import AuditLog, Broker, BrokerDue, Contract, Installment, Unit, UnitPartner, Voucher
from ..services.brokers import BrokerService
from ..services.contracts import ContractService
from ..services.installments import InstallmentService
from .helpers import create_customer, create_safe, create_unit, link_partners


class CreateContractTestCase(TestCase):
    """اختبارات إنشاء العقود"""

    def setUp(self):
        self.customer = create_customer()
        self.unit = create_unit(price='100000')
        self.safe = create_safe(balance='0')
        self.partners = link_partners(self.unit, '50', '50')

    def _create(self, **kwargs):
        params = {
            'unit': self.unit,
            'customer': self.customer,
            'start_date': date(2024, 1, 1),
            'down_payment': Decimal('10000'),
            'installments_count': 9,
            'down_payment_safe': self.safe,
        }
        params.update(kwargs)
        return ContractService.create_contract(**params)

    def test_create_installment_contract(self):
        """إنشاء عقد تقسيط بمقدم وتسعة أقساط"""
        contract = self._create()

        self.assertEqual(contract.code, 'CTR-00001')
        self.assertEqual(contract.payment_type, Contract.PAYMENT_INSTALLMENT)

        self.unit.refresh_from_db()
        self.assertEqual(self.unit.status, Unit.STATUS_SOLD)

        self.safe.refresh_from_db()
        self.assertEqual(self.safe.balance, Decimal('10000'))

        voucher = Voucher.objects.get()
        self.assertEqual(voucher.voucher_number, 'RV-000001')
        self.assertEqual(voucher.type, Voucher.TYPE_RECEIPT)
        self.assertEqual(voucher.contract, contract)
        self.assertEqual(voucher.party, self.customer.name)

        installments = list(contract.installments.all())
        self.assertEqual(len(installments), 9)
        for installment in installments:
            self.assertEqual(installment.amount, Decimal('10000'))
            self.assertEqual(installment.original_amount, installment.amount)
            self.assertEqual(installment.status, Installment.STATUS_UNPAID)
        self.assertEqual(installments[0].due_date, date(2024, 2, 1))

        self.assertTrue(AuditLog.objects.filter(description='إنشاء عقد جديد').exists())

    def test_contract_codes_increment(self):
        self._create()
        other_unit = create_unit(name='شقة 2')
        link_partners(other_unit, '100')
        contract = self._create(unit=other_unit)
        self.assertEqual(contract.code, 'CTR-00002')

    def _assert_nothing_created(self):
        self.unit.refresh_from_db()
        self.safe.refresh_from_db()
        self.assertEqual(self.unit.status, Unit.STATUS_AVAILABLE)
        self.assertFalse(Contract.objects.exists())
        self.assertFalse(Voucher.objects.exists())
        self.assertFalse(Installment.objects.exists())
        self.assertEqual(self.safe.balance, Decimal('0'))

    def test_partners_total_99_rejected(self):
        """مجموع نسب 99% يمنع إنشاء العقد"""
        UnitPartner.objects.filter(unit=self.unit, partner=self.partners[1]).update(percent=Decimal('49'))
        with self.assertRaises(ValidationError):
            self._create()
        self._assert_nothing_created()

    def test_partners_total_101_rejected(self):
        """مجموع نسب 101% يمنع إنشاء العقد"""
        UnitPartner.objects.filter(unit=self.unit, partner=self.partners[1]).update(percent=Decimal('51'))
        with self.assertRaises(ValidationError):
            self._create()
        self._assert_nothing_created()

    def test_unit_without_partners_rejected(self):
        UnitPartner.objects.all().delete()
        with self.assertRaises(ValidationError):
            self._create()
        self._assert_nothing_created()

    def test_sold_unit_rejected(self):
        self._create()
        with self.assertRaises(ValidationError):
            self._create()
        self.assertEqual(Contract.objects.count(), 1)

    def test_reserved_unit_can_be_sold(self):
        self.unit.status = Unit.STATUS_RESERVED
        self.unit.save()
        contract = self._create()
        self.assertEqual(contract.unit.status, Unit.STATUS_SOLD)

    def test_down_payment_requires_safe(self):
        with self.assertRaises(ValidationError):
            self._create(down_payment_safe=None)
        self._assert_nothing_created()

    def test_installment_contract_requires_count(self):
        with self.assertRaises(ValidationError):
            self._create(installments_count=0)
        self._assert_nothing_created()

    def test_annual_payments_require_value(self):
        with self.assertRaises(ValidationError):
            self._create(extra_annual=2, annual_payment_value=0)
        self._assert_nothing_created()

    def test_schedule_errors_leave_no_trace(self):
        """خطأ في حساب الجدول لا يترك أي أثر"""
        with self.assertRaises(ValidationError):
            self._create(extra_annual=3, annual_payment_value=Decimal('40000'))
        self._assert_nothing_created()

    def test_extra_annual_clamped_to_three(self):
        contract = self._create(extra_annual=5, annual_payment_value=Decimal('1000'))
        self.assertEqual(contract.extra_annual, 3)
        self.assertEqual(contract.installments.filter(kind=Installment.KIND_ANNUAL).count(), 3)

    def test_full_down_payment_becomes_cash(self):
        """المقدم يساوي السعر فيصبح العقد كاش بدون أقساط"""
        contract = self._create(down_payment=Decimal('100000'), installments_count=0)
        self.assertEqual(contract.payment_type, Contract.PAYMENT_CASH)
        self.assertFalse(contract.installments.exists())
        self.safe.refresh_from_db()
        self.assertEqual(self.safe.balance, Decimal('100000'))

    def test_broker_due_created(self):
        """عمولة السمسار = السعر × النسبة"""
        broker = Broker.objects.create(name='سمسار تجريبي')
        contract = self._create(
            broker_name='سمسار تجريبي',
            broker_percent=Decimal('2.5'),
            commission_safe=self.safe,
        )
        self.assertEqual(contract.broker_amount, Decimal('2500.00'))
        due = BrokerDue.objects.get()
        self.assertEqual(due.amount, Decimal('2500.00'))
        self.assertEqual(due.status, BrokerDue.STATUS_DUE)
        self.assertEqual(due.broker, broker)
        self.assertEqual(due.due_date, date(2024, 1, 1))

    def test_broker_requires_commission_safe(self):
        with self.assertRaises(ValidationError):
            self._create(broker_name='سمسار', broker_percent=Decimal('2'))
        self._assert_nothing_created()

    def test_contract_summary(self):
        contract = self._create(maintenance_deposit=Decimal('5000'))
        summary = ContractService.get_contract_summary(contract)

        self.assertEqual(summary['installment_base'], Decimal('95000'))
        self.assertEqual(summary['remaining_regular'], Decimal('85000'))
        self.assertEqual(summary['remaining_maintenance'], Decimal('5000'))
        self.assertEqual(summary['total_debt'], Decimal('90000'))
        self.assertEqual(summary['total_paid'], Decimal('10000'))
        self.assertEqual(contract.get_summary()['installments_count'], 10)


class DeleteContractTestCase(TestCase):
    """اختبارات حذف العقود"""

    def setUp(self):
        self.customer = create_customer()
        self.unit = create_unit(price='100000')
        self.safe = create_safe(balance='10000')
        link_partners(self.unit, '100')
        self.contract = ContractService.create_contract(
            unit=self.unit,
            customer=self.customer,
            start_date=date(2024, 1, 1),
            down_payment=Decimal('20000'),
            installments_count=4,
            broker_name='سمسار',
            broker_percent=Decimal('2'),
            commission_safe=self.safe,
            down_payment_safe=self.safe,
        )

    def test_delete_reverses_receipts(self):
        """حذف العقد يعكس سندات القبض ويعيد الوحدة متاحة"""
        InstallmentService.process_payment(self.unit, Decimal('15000'), date(2024, 2, 1), self.safe)
        self.safe.refresh_from_db()
        self.assertEqual(self.safe.balance, Decimal('45000'))

        ContractService.delete_contract(self.contract)

        self.safe.refresh_from_db()
        self.unit.refresh_from_db()
        self.assertEqual(self.safe.balance, Decimal('10000'))
        self.assertEqual(self.unit.status, Unit.STATUS_AVAILABLE)
        self.assertFalse(Contract.objects.exists())
        self.assertFalse(Installment.objects.exists())
        self.assertFalse(Voucher.objects.exists())
        self.assertFalse(BrokerDue.objects.exists())

    def test_delete_refunds_paid_commission(self):
        BrokerService.pay_broker_due(self.contract.broker_dues.get(), date(2024, 1, 2))
        self.safe.refresh_from_db()
        self.assertEqual(self.safe.balance, Decimal('28000'))

        ContractService.delete_contract(self.contract, keep_commission=False)

        self.safe.refresh_from_db()
        self.assertEqual(self.safe.balance, Decimal('10000'))
        self.assertFalse(BrokerDue.objects.exists())
        self.assertFalse(Voucher.objects.exists())

    def test_delete_keeps_paid_commission(self):
        BrokerService.pay_broker_due(self.contract.broker_dues.get(), date(2024, 1, 2))

        ContractService.delete_contract(self.contract, keep_commission=True)

        self.safe.refresh_from_db()
        self.assertEqual(self.safe.balance, Decimal('8000'))
        due = BrokerDue.objects.get()
        self.assertIsNone(due.contract)
        self.assertEqual(due.status, BrokerDue.STATUS_PAID)
        self.assertEqual(Voucher.objects.get().type, Voucher.TYPE_PAYMENT)
