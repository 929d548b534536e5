from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import SimpleTestCase

from ..services.money import format_egp, parse_amount, round_money, split_evenly, to_decimal
from ..services.schedule import plan_installments


class MoneyTestCase(SimpleTestCase):
    """اختبارات دوال المبالغ"""

    def test_to_decimal(self):
        self.assertEqual(to_decimal(None), Decimal('0'))
        self.assertEqual(to_decimal(''), Decimal('0'))
        self.assertEqual(to_decimal(12.5), Decimal('12.5'))
        with self.assertRaises(ValidationError):
            to_decimal('abc')

    def test_parse_amount_strips_symbols(self):
        """قراءة المبلغ من نص فيه فواصل وعملة"""
        self.assertEqual(parse_amount('1,500.75 ج.م'), Decimal('1500.75'))
        self.assertEqual(parse_amount('EGP 250'), Decimal('250'))
        self.assertEqual(parse_amount(''), Decimal('0'))

    def test_round_money_half_up(self):
        self.assertEqual(round_money(Decimal('10.005')), Decimal('10.01'))
        self.assertEqual(round_money(Decimal('10.004')), Decimal('10.00'))

    def test_split_evenly(self):
        """الدفعات متساوية والأخيرة تأخذ باقي القسمة"""
        self.assertEqual(
            split_evenly(Decimal('100'), 3),
            [Decimal('33.33'), Decimal('33.33'), Decimal('33.34')]
        )
        self.assertEqual(split_evenly(Decimal('100'), 0), [])

    def test_split_evenly_negative(self):
        amounts = split_evenly(Decimal('-100'), 3)
        self.assertEqual(amounts[:2], [Decimal('-33.33'), Decimal('-33.33')])
        self.assertEqual(sum(amounts), Decimal('-100'))

    def test_format_egp(self):
        self.assertEqual(format_egp(Decimal('1234567.5')), '١٬٢٣٤٬٥٦٧٫٥٠ ج.م')


class PlanInstallmentsTestCase(SimpleTestCase):
    """اختبارات حساب جدول الأقساط"""

    def test_regular_rounding_conservation(self):
        """مجموع الأقساط العادية يساوي المبلغ المقسط بالضبط"""
        for total, count in [('100000', 3), ('99999.99', 7), ('1000', 12), ('250000', 36)]:
            lines = plan_installments(total_price=Decimal(total), start_date=date(2024, 1, 1), count=count)
            amounts = [line['amount'] for line in lines]
            self.assertEqual(len(amounts), count)
            self.assertEqual(sum(amounts), Decimal(total))
            self.assertEqual(len(set(amounts[:-1])), 1 if count > 1 else 0)

    def test_month_end_clamping(self):
        lines = plan_installments(total_price=Decimal('100000'), start_date=date(2024, 1, 31), count=3)
        self.assertEqual(
            [line['amount'] for line in lines],
            [Decimal('33333.33'), Decimal('33333.33'), Decimal('33333.34')]
        )
        self.assertEqual(
            [line['due_date'] for line in lines],
            [date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)]
        )

    def test_full_schedule(self):
        """أقساط ربع سنوية مع دفعات سنوية ودفعة صيانة"""
        lines = plan_installments(
            total_price=Decimal('100000'),
            start_date=date(2024, 1, 1),
            months=3,
            count=4,
            discount=Decimal('5000'),
            down_payment=Decimal('10000'),
            maintenance_deposit=Decimal('5000'),
            extra_annual=2,
            annual_value=Decimal('10000'),
        )

        regular = [line for line in lines if line['kind'] == 'regular']
        annual = [line for line in lines if line['kind'] == 'annual']
        maintenance = [line for line in lines if line['kind'] == 'maintenance']

        self.assertEqual([line['amount'] for line in regular], [Decimal('15000')] * 4)
        self.assertEqual(
            [line['due_date'] for line in regular],
            [date(2024, 4, 1), date(2024, 7, 1), date(2024, 10, 1), date(2025, 1, 1)]
        )
        self.assertEqual([line['due_date'] for line in annual], [date(2025, 1, 1), date(2026, 1, 1)])
        self.assertEqual(maintenance[0]['amount'], Decimal('5000'))
        self.assertEqual(maintenance[0]['due_date'], date(2026, 4, 1))
        self.assertEqual(sum(line['amount'] for line in lines), Decimal('85000'))

    def test_maintenance_only_due_at_start(self):
        lines = plan_installments(
            total_price=Decimal('10000'),
            start_date=date(2024, 5, 1),
            down_payment=Decimal('5000'),
            maintenance_deposit=Decimal('5000'),
        )
        self.assertEqual(len(lines), 1)
        self.assertEqual(lines[0]['kind'], 'maintenance')
        self.assertEqual(lines[0]['due_date'], date(2024, 5, 1))

    def test_down_payment_above_base_rejected(self):
        with self.assertRaises(ValidationError):
            plan_installments(
                total_price=Decimal('100000'),
                start_date=date(2024, 1, 1),
                count=2,
                down_payment=Decimal('96000'),
                maintenance_deposit=Decimal('5000'),
            )

    def test_annual_above_remaining_rejected(self):
        with self.assertRaises(ValidationError):
            plan_installments(
                total_price=Decimal('100000'),
                start_date=date(2024, 1, 1),
                count=2,
                down_payment=Decimal('50000'),
                extra_annual=3,
                annual_value=Decimal('20000'),
            )
