from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase

from ..models import Installment, Partner, PartnerGroup, PartnerGroupMember, Voucher, build_unit_code
from .helpers import create_safe, create_unit


class UnitCodeTestCase(SimpleTestCase):

    def test_build_unit_code(self):
        self.assertEqual(build_unit_code('برج 1', ' 3 ', 'شقة 5'), 'برج1-3-شقة5')
        self.assertEqual(build_unit_code('A', 2, None), 'A-2-')


class UnitModelTestCase(TestCase):

    def test_display_name(self):
        unit = create_unit(name='شقة 4', floor='2', building='B')
        self.assertEqual(unit.display_name, 'اسم الوحدة (شقة 4) رقم الدور (2) رقم العمارة (B)')
        self.assertEqual(str(unit), 'B-2-شقة4')


class VoucherNumberTestCase(TestCase):
    """ترقيم السندات منفصل لكل نوع"""

    def setUp(self):
        self.safe = create_safe()

    def _create(self, voucher_type):
        return Voucher.objects.create(type=voucher_type, amount=Decimal('10'), safe=self.safe, description='سند')

    def test_numbers_per_type(self):
        self.assertEqual(self._create(Voucher.TYPE_RECEIPT).voucher_number, 'RV-000001')
        self.assertEqual(self._create(Voucher.TYPE_PAYMENT).voucher_number, 'PV-000001')
        self.assertEqual(self._create(Voucher.TYPE_RECEIPT).voucher_number, 'RV-000002')

    def test_number_not_reused_after_gap(self):
        self._create(Voucher.TYPE_RECEIPT)
        second = self._create(Voucher.TYPE_RECEIPT)
        third = self._create(Voucher.TYPE_RECEIPT)
        second.delete()
        self.assertEqual(third.voucher_number, 'RV-000003')
        self.assertEqual(self._create(Voucher.TYPE_RECEIPT).voucher_number, 'RV-000004')


class InstallmentModelTestCase(TestCase):

    def setUp(self):
        self.unit = create_unit()

    def test_paid_amount_and_overdue(self):
        installment = Installment.objects.create(
            unit=self.unit,
            amount=Decimal('30'),
            original_amount=Decimal('100'),
            due_date=date(2024, 3, 1),
            status=Installment.STATUS_PARTIAL,
        )
        self.assertEqual(installment.paid_amount, Decimal('70'))
        self.assertTrue(installment.is_overdue(today=date(2024, 3, 2)))
        self.assertFalse(installment.is_overdue(today=date(2024, 3, 1)))

    def test_open_for_unit_order(self):
        later = Installment.objects.create(
            unit=self.unit, amount=Decimal('10'), original_amount=Decimal('10'), due_date=date(2024, 5, 1)
        )
        earlier = Installment.objects.create(
            unit=self.unit, amount=Decimal('10'), original_amount=Decimal('10'), due_date=date(2024, 4, 1)
        )
        Installment.objects.create(
            unit=self.unit, amount=Decimal('0'), original_amount=Decimal('10'),
            due_date=date(2024, 3, 1), status=Installment.STATUS_PAID
        )
        self.assertEqual(list(Installment.open_for_unit(self.unit)), [earlier, later])
        self.assertEqual(Installment.total_open_amount(self.unit), Decimal('20'))


class PartnerGroupTestCase(TestCase):

    def test_validate_total_percent(self):
        group = PartnerGroup.objects.create(name='مجموعة')
        first = Partner.objects.create(name='شريك 1')
        second = Partner.objects.create(name='شريك 2')
        PartnerGroupMember.objects.create(group=group, partner=first, percent=Decimal('70'))

        with self.assertRaises(ValidationError):
            group.validate_total_percent()

        PartnerGroupMember.objects.create(group=group, partner=second, percent=Decimal('30'))
        group.validate_total_percent()
        self.assertEqual(group.get_total_percent(), Decimal('100'))
