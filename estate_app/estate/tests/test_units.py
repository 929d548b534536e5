from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from ..models import Contract, Installment, Partner, PartnerDebt, Unit, UnitPartner, Voucher
from ..services.contracts import ContractService
from ..services.installments import InstallmentService
from ..services.partners import PartnerService
from ..services.units import UnitService
from .helpers import create_customer, create_safe, create_unit, link_partners


class CalcRemainingTestCase(TestCase):
    """اختبارات حساب المتبقي على الوحدة"""

    def setUp(self):
        self.customer = create_customer()
        self.unit = create_unit(price='100000')
        self.safe = create_safe()
        link_partners(self.unit, '100')

    def test_no_contract(self):
        self.assertEqual(UnitService.calc_remaining(self.unit), Decimal('0'))

    def test_remaining_after_payments(self):
        ContractService.create_contract(
            unit=self.unit,
            customer=self.customer,
            start_date=date(2024, 1, 1),
            discount_amount=Decimal('5000'),
            down_payment=Decimal('10000'),
            installments_count=10,
            down_payment_safe=self.safe,
        )
        self.assertEqual(self.unit.calc_remaining(), Decimal('85000'))

        InstallmentService.process_payment(self.unit, Decimal('20000'), date(2024, 2, 1), self.safe)
        self.assertEqual(self.unit.calc_remaining(), Decimal('65000'))

    def test_never_negative(self):
        """المتبقي لا يقل عن صفر حتى مع الدفع الزائد"""
        ContractService.create_contract(
            unit=self.unit,
            customer=self.customer,
            start_date=date(2024, 1, 1),
            installments_count=2,
        )
        InstallmentService.process_payment(self.unit, Decimal('120000'), date(2024, 2, 1), self.safe)
        self.assertEqual(UnitService.calc_remaining(self.unit), Decimal('0'))

    def test_unlinked_receipts_ignored(self):
        contract = ContractService.create_contract(
            unit=self.unit,
            customer=self.customer,
            start_date=date(2024, 1, 1),
            installments_count=2,
        )
        Voucher.objects.create(
            type=Voucher.TYPE_RECEIPT, amount=Decimal('500'), safe=self.safe, description='سند عام'
        )
        self.assertEqual(UnitService.calc_remaining(contract.unit), Decimal('100000'))


class UnitServiceTestCase(TestCase):
    """اختبارات إضافة وتعديل الوحدات"""

    def test_create_unit_with_group(self):
        partners = [PartnerService.create_partner(f'شريك {i}') for i in range(2)]
        group = PartnerService.create_group('مجموعة', [(partners[0], '70'), (partners[1], '30')])

        unit = UnitService.create_unit('شقة 5', ' 3 ', 'برج 1', '750000', partner_group=group)

        self.assertEqual(unit.code, 'برج1-3-شقة5')
        self.assertEqual(unit.status, Unit.STATUS_AVAILABLE)
        self.assertEqual(unit.get_partners_total_percent(), Decimal('100'))

    def test_incomplete_group_rejected(self):
        partner = PartnerService.create_partner('شريك')
        group = PartnerService.create_group('مجموعة ناقصة', [(partner, '90')])
        with self.assertRaises(ValidationError):
            UnitService.create_unit('شقة 1', '1', 'A', '100000', partner_group=group)
        self.assertFalse(Unit.objects.exists())

    def test_duplicate_code_rejected(self):
        UnitService.create_unit('Flat 1', '1', 'A', '100000')
        with self.assertRaises(ValidationError):
            UnitService.create_unit('flat1', '1', 'a', '100000')

    def test_required_fields(self):
        with self.assertRaises(ValidationError):
            UnitService.create_unit('', '1', 'A', '100000')
        with self.assertRaises(ValidationError):
            UnitService.create_unit('شقة', '1', 'A', '0')

    def test_longest_code_fits(self):
        """كود الوحدة بأطول اسم ودور وبرج مسموح بهم يمر بالتحقق"""
        unit = UnitService.create_unit('ن' * 100, '1' * 20, 'B' * 50, '100000')

        self.assertEqual(len(unit.code), 172)
        self.assertLessEqual(len(unit.code), Unit._meta.get_field('code').max_length)
        unit.full_clean()

    def test_update_unit_rebuilds_code(self):
        unit = UnitService.create_unit('شقة 1', '1', 'A', '100000')
        UnitService.update_unit(unit, floor='2', status=Unit.STATUS_RESERVED)

        unit.refresh_from_db()
        self.assertEqual(unit.code, 'A-2-شقة1')
        self.assertEqual(unit.status, Unit.STATUS_RESERVED)

    def test_update_unit_cannot_mark_sold(self):
        unit = UnitService.create_unit('شقة 1', '1', 'A', '100000')
        with self.assertRaises(ValidationError):
            UnitService.update_unit(unit, status=Unit.STATUS_SOLD)


class UnitPartnersTestCase(TestCase):
    """اختبارات ربط الشركاء بالوحدة"""

    def setUp(self):
        self.unit = create_unit()
        self.first = Partner.objects.create(name='شريك أول')
        self.second = Partner.objects.create(name='شريك ثان')

    def test_add_partner(self):
        UnitService.add_partner(self.unit, self.first, '60')
        UnitService.add_partner(self.unit, self.second, '40')
        self.assertEqual(self.unit.get_partners_total_percent(), Decimal('100'))

    def test_total_above_100_rejected(self):
        UnitService.add_partner(self.unit, self.first, '60')
        with self.assertRaises(ValidationError):
            UnitService.add_partner(self.unit, self.second, '41')
        self.assertEqual(self.unit.partner_links.count(), 1)

    def test_duplicate_partner_rejected(self):
        UnitService.add_partner(self.unit, self.first, '10')
        with self.assertRaises(ValidationError):
            UnitService.add_partner(self.unit, self.first, '10')

    def test_zero_percent_rejected(self):
        with self.assertRaises(ValidationError):
            UnitService.add_partner(self.unit, self.first, '0')

    def test_update_and_remove_percent(self):
        link = UnitService.add_partner(self.unit, self.first, '60')
        UnitService.add_partner(self.unit, self.second, '40')

        with self.assertRaises(ValidationError):
            UnitService.update_partner_percent(link, '61')

        UnitService.update_partner_percent(link, '50')
        link.refresh_from_db()
        self.assertEqual(link.percent, Decimal('50'))

        UnitService.remove_partner(link)
        self.assertEqual(self.unit.get_partners_total_percent(), Decimal('40'))


class ExecuteReturnTestCase(TestCase):
    """اختبارات إرجاع الوحدة وشرائها من أحد الشركاء"""

    def setUp(self):
        self.customer = create_customer()
        self.unit = create_unit(price='100000')
        self.safe = create_safe()
        self.buyer, self.seller_b, self.seller_c = link_partners(self.unit, '50', '30', '20')
        self.contract = ContractService.create_contract(
            unit=self.unit,
            customer=self.customer,
            start_date=date(2024, 1, 1),
            installments_count=4,
        )
        self.due_dates = list(
            self.contract.installments.order_by('due_date').values_list('due_date', flat=True)
        )

    def test_return_creates_partner_debts(self):
        InstallmentService.process_payment(self.unit, Decimal('25000'), date(2024, 2, 1), self.safe)

        debts = UnitService.execute_return(self.unit, self.buyer)

        self.unit.refresh_from_db()
        self.assertEqual(self.unit.status, Unit.STATUS_AVAILABLE)
        self.assertFalse(Contract.objects.exists())

        # القسط المسدد يبقى بدون عقد
        remaining = Installment.objects.get(unit=self.unit)
        self.assertEqual(remaining.status, Installment.STATUS_PAID)
        self.assertIsNone(remaining.contract)

        self.assertEqual(len(debts), 8)
        for seller, total in [(self.seller_b, Decimal('30000')), (self.seller_c, Decimal('20000'))]:
            seller_debts = PartnerDebt.objects.filter(owed_partner=seller).order_by('due_date')
            self.assertEqual(seller_debts.count(), 4)
            self.assertEqual(sum(debt.amount for debt in seller_debts), total)
            self.assertEqual([debt.due_date for debt in seller_debts], self.due_dates)
            self.assertTrue(all(debt.paying_partner == self.buyer for debt in seller_debts))
        self.assertFalse(PartnerDebt.objects.filter(owed_partner=self.buyer).exists())

        links = list(UnitPartner.objects.filter(unit=self.unit))
        self.assertEqual(len(links), 1)
        self.assertEqual(links[0].partner, self.buyer)
        self.assertEqual(links[0].percent, Decimal('100'))

    def test_uneven_split_conserves_total(self):
        """مجموع ديون كل شريك بائع يساوي حصته بالضبط"""
        unit = create_unit(name='شقة 2', price='100000')
        buyer, seller, _ = link_partners(unit, '33.33', '33.33', '33.34')
        ContractService.create_contract(
            unit=unit,
            customer=self.customer,
            start_date=date(2024, 1, 1),
            installments_count=7,
        )

        UnitService.execute_return(unit, buyer)

        amounts = list(PartnerDebt.objects.filter(owed_partner=seller).values_list('amount', flat=True))
        self.assertEqual(len(amounts), 7)
        self.assertEqual(sum(amounts), Decimal('33330'))

    def test_buyer_must_be_partner(self):
        outsider = Partner.objects.create(name='شريك خارجي')
        with self.assertRaises(ValidationError):
            UnitService.execute_return(self.unit, outsider)
        self.assertTrue(Contract.objects.exists())

    def test_unit_must_be_sold(self):
        unit = create_unit(name='شقة 3')
        partner = link_partners(unit, '100')[0]
        with self.assertRaises(ValidationError):
            UnitService.execute_return(unit, partner)

    def test_pay_partner_debt(self):
        UnitService.execute_return(self.unit, self.buyer)
        debt = PartnerDebt.objects.filter(owed_partner=self.seller_b).first()

        PartnerService.pay_partner_debt(debt, date(2024, 3, 1))

        debt.refresh_from_db()
        self.assertEqual(debt.status, PartnerDebt.STATUS_PAID)
        self.assertEqual(debt.payment_date, date(2024, 3, 1))
        with self.assertRaises(ValidationError):
            PartnerService.pay_partner_debt(debt)
