import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from ..models import Partner, PartnerDebt, PartnerGroup, PartnerGroupMember, Voucher
from .audit import AuditService
from .money import ZERO, round_money, to_decimal

logger = logging.getLogger(__name__)


class PartnerService:
    """خدمة الشركاء وحصصهم"""

    @staticmethod
    def create_partner(name, phone='', notes=''):
        name = (name or '').strip()
        if not name:
            raise ValidationError('الرجاء إدخال اسم الشريك.')
        partner = Partner.objects.create(name=name, phone=phone or '', notes=notes or '')
        AuditService.log_action('إضافة شريك جديد', partner_id=partner.pk, name=name)
        return partner

    @staticmethod
    def create_group(name, members):
        """إنشاء مجموعة شركاء من قائمة (الشريك، النسبة)"""
        name = (name or '').strip()
        if not name:
            raise ValidationError('الرجاء إدخال اسم المجموعة.')
        if PartnerGroup.objects.filter(name=name).exists():
            raise ValidationError('توجد مجموعة بنفس الاسم بالفعل.')

        total = ZERO
        seen = set()
        for partner, percent in members:
            percent = to_decimal(percent)
            if percent <= 0:
                raise ValidationError('الرجاء إدخال نسبة صحيحة لكل شريك.')
            if partner.pk in seen:
                raise ValidationError('هذا الشريك موجود بالفعل في المجموعة.')
            seen.add(partner.pk)
            total += percent
        if total > 100:
            raise ValidationError(f'مجموع النسب {total}% يتجاوز 100%.')

        with transaction.atomic():
            group = PartnerGroup.objects.create(name=name)
            PartnerGroupMember.objects.bulk_create([
                PartnerGroupMember(group=group, partner=partner, percent=to_decimal(percent))
                for partner, percent in members
            ])
            AuditService.log_action('إضافة مجموعة شركاء', group_id=group.pk, name=name, total=total)
        return group

    @staticmethod
    def voucher_contract(voucher):
        """العقد المرتبط بالسند مباشرة أو عن طريق القسط أو عمولة السمسار"""
        if voucher.contract_id:
            return voucher.contract
        if voucher.installment_id and voucher.installment.contract_id:
            return voucher.installment.contract
        if voucher.broker_due_id and voucher.broker_due.contract_id:
            return voucher.broker_due.contract
        return None

    @staticmethod
    def voucher_shares(voucher):
        """حصة كل شريك في السند = المبلغ × نسبته في الوحدة"""
        contract = PartnerService.voucher_contract(voucher)
        if contract is None:
            return []

        return [
            {
                'partner': link.partner,
                'percent': link.percent,
                'amount': round_money(voucher.amount * link.percent / Decimal('100')),
            }
            for link in contract.unit.partner_links.select_related('partner')
        ]

    @staticmethod
    def partner_ledger(partner):
        """كشف حساب الشريك

        الدخل: حصته من سندات القبض وديون الشركاء المحصلة.
        المصروفات: حصته من عمولات السماسرة وديون الشركاء المسددة منه.
        """
        transactions = []
        total_income = ZERO
        total_expense = ZERO

        vouchers = Voucher.objects.filter(
            Q(contract__unit__partner_links__partner=partner) |
            Q(installment__contract__unit__partner_links__partner=partner) |
            Q(broker_due__contract__unit__partner_links__partner=partner)
        ).distinct().select_related('contract', 'installment__contract', 'broker_due__contract')

        for voucher in vouchers:
            share = next(
                (item for item in PartnerService.voucher_shares(voucher) if item['partner'].pk == partner.pk),
                None
            )
            if share is None:
                continue
            if voucher.is_receipt:
                transactions.append({
                    'date': voucher.date,
                    'description': voucher.description,
                    'income': share['amount'],
                    'expense': ZERO,
                })
                total_income += share['amount']
            elif voucher.broker_due_id:
                transactions.append({
                    'date': voucher.date,
                    'description': voucher.description,
                    'income': ZERO,
                    'expense': share['amount'],
                })
                total_expense += share['amount']

        paid_debts = PartnerDebt.objects.filter(
            status=PartnerDebt.STATUS_PAID
        ).filter(
            Q(owed_partner=partner) | Q(paying_partner=partner)
        ).select_related('owed_partner', 'paying_partner')

        for debt in paid_debts:
            if debt.owed_partner_id == partner.pk:
                transactions.append({
                    'date': debt.payment_date,
                    'description': f'تحصيل دين من {debt.paying_partner.name}',
                    'income': debt.amount,
                    'expense': ZERO,
                })
                total_income += debt.amount
            if debt.paying_partner_id == partner.pk:
                transactions.append({
                    'date': debt.payment_date,
                    'description': f'سداد دين إلى {debt.owed_partner.name}',
                    'income': ZERO,
                    'expense': debt.amount,
                })
                total_expense += debt.amount

        transactions.sort(key=lambda tx: (tx['date'] is None, tx['date']))

        balance = ZERO
        for tx in transactions:
            balance += tx['income'] - tx['expense']
            tx['balance'] = balance

        return {
            'transactions': transactions,
            'total_income': total_income,
            'total_expense': total_expense,
            'net_position': total_income - total_expense,
        }

    @staticmethod
    def pay_partner_debt(debt, payment_date=None):
        """تسجيل سداد دين بين شريكين"""
        if debt.status == PartnerDebt.STATUS_PAID:
            raise ValidationError('هذا الدين مسدد بالفعل.')

        with transaction.atomic():
            debt.status = PartnerDebt.STATUS_PAID
            debt.payment_date = payment_date or timezone.localdate()
            debt.save(update_fields=['status', 'payment_date'])
            AuditService.log_action(
                'سداد دين شريك',
                debt_id=debt.pk, amount=debt.amount,
                paying_partner_id=debt.paying_partner_id, owed_partner_id=debt.owed_partner_id
            )
        return debt

    @staticmethod
    def get_open_debts(partner=None):
        debts = PartnerDebt.objects.filter(status=PartnerDebt.STATUS_UNPAID)
        if partner is not None:
            debts = debts.filter(Q(owed_partner=partner) | Q(paying_partner=partner))
        return debts.select_related('unit', 'owed_partner', 'paying_partner')
