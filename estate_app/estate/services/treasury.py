import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import F, Q, Sum
from django.utils import timezone

from ..models import Safe, Transfer, Voucher
from .audit import AuditService
from .money import ZERO, round_money

logger = logging.getLogger(__name__)


class TreasuryService:
    """خدمة إدارة الخزائن والسندات"""

    @staticmethod
    def adjust_balance(safe, delta):
        """تعديل رصيد الخزنة في قاعدة البيانات ثم تحديث الكائن"""
        Safe.objects.filter(pk=safe.pk).update(balance=F('balance') + delta)
        safe.refresh_from_db(fields=['balance'])
        return safe.balance

    @staticmethod
    def create_safe(name, opening_balance=ZERO):
        name = (name or '').strip()
        if not name:
            raise ValidationError('الرجاء إدخال اسم الخزنة.')
        if Safe.objects.filter(name=name).exists():
            raise ValidationError('توجد خزنة بنفس الاسم بالفعل.')

        opening_balance = round_money(opening_balance)
        try:
            with transaction.atomic():
                safe = Safe.objects.create(
                    name=name,
                    opening_balance=opening_balance,
                    balance=opening_balance
                )
        except IntegrityError:
            raise ValidationError('توجد خزنة بنفس الاسم بالفعل.')

        AuditService.log_action('إضافة خزنة جديدة', safe_id=safe.pk, name=name, balance=opening_balance)
        return safe

    @staticmethod
    def create_voucher(voucher_type, safe, amount, date=None, description='', party='',
                       unit=None, contract=None, installment=None, broker_due=None):
        """إنشاء سند قبض أو صرف وتعديل رصيد الخزنة بقيمته"""
        amount = round_money(amount)
        if amount <= 0:
            raise ValidationError('قيمة السند يجب أن تكون أكبر من صفر.')
        if safe is None:
            raise ValidationError('الرجاء اختيار الخزنة.')

        voucher = Voucher.objects.create(
            type=voucher_type,
            date=date or timezone.localdate(),
            amount=amount,
            safe=safe,
            description=description,
            party=party or '',
            unit=unit,
            contract=contract,
            installment=installment,
            broker_due=broker_due,
        )
        delta = amount if voucher_type == Voucher.TYPE_RECEIPT else -amount
        TreasuryService.adjust_balance(safe, delta)
        return voucher

    @staticmethod
    def transfer(from_safe, to_safe, amount, date=None, notes=''):
        """تحويل مبلغ بين خزنتين"""
        amount = round_money(amount)
        if from_safe is None or to_safe is None:
            raise ValidationError('الرجاء اختيار الخزنتين.')
        if from_safe.pk == to_safe.pk:
            raise ValidationError('لا يمكن التحويل لنفس الخزنة.')
        if amount <= 0:
            raise ValidationError('الرجاء إدخال مبلغ صحيح.')

        from_safe.refresh_from_db(fields=['balance'])
        if from_safe.balance < amount:
            raise ValidationError(f'رصيد خزنة "{from_safe.name}" غير كافٍ.')

        with transaction.atomic():
            transfer = Transfer.objects.create(
                from_safe=from_safe,
                to_safe=to_safe,
                amount=amount,
                date=date or timezone.localdate(),
                notes=notes or ''
            )
            TreasuryService.adjust_balance(from_safe, -amount)
            TreasuryService.adjust_balance(to_safe, amount)
            AuditService.log_action(
                'تحويل بين الخزن',
                transfer_id=transfer.pk, from_safe_id=from_safe.pk, to_safe_id=to_safe.pk, amount=amount
            )

        logger.info('Transferred %s from %s to %s', amount, from_safe.name, to_safe.name)
        return transfer

    @staticmethod
    def add_expense(safe, amount, date=None, description='', beneficiary='', unit=None):
        """تسجيل مصروف كسند صرف"""
        amount = round_money(amount)
        if safe is None or not (description or '').strip():
            raise ValidationError('الرجاء إدخال الخزنة والبيان.')
        if amount <= 0:
            raise ValidationError('الرجاء إدخال مبلغ صحيح.')

        safe.refresh_from_db(fields=['balance'])
        if safe.balance < amount:
            raise ValidationError(f'رصيد خزنة "{safe.name}" غير كافٍ.')

        with transaction.atomic():
            voucher = TreasuryService.create_voucher(
                voucher_type=Voucher.TYPE_PAYMENT,
                safe=safe,
                amount=amount,
                date=date,
                description=description.strip(),
                party=beneficiary,
                unit=unit,
            )
            AuditService.log_action(
                'إضافة مصروف',
                voucher_id=voucher.pk, safe_id=safe.pk, amount=amount
            )
        return voucher

    @staticmethod
    def delete_voucher(voucher, log=True):
        """حذف سند وعكس أثره على رصيد الخزنة"""
        delta = -voucher.amount if voucher.is_receipt else voucher.amount
        with transaction.atomic():
            TreasuryService.adjust_balance(voucher.safe, delta)
            if log:
                AuditService.log_action(
                    'حذف سند',
                    voucher_id=voucher.pk, number=voucher.voucher_number, amount=voucher.amount
                )
            voucher.delete()

    @staticmethod
    def get_ledger_balance(safe):
        """الرصيد الافتتاحي + القبض - الصرف + التحويلات الواردة - الصادرة"""
        receipts = safe.vouchers.filter(type=Voucher.TYPE_RECEIPT).aggregate(
            total=Sum('amount'))['total'] or ZERO
        payments = safe.vouchers.filter(type=Voucher.TYPE_PAYMENT).aggregate(
            total=Sum('amount'))['total'] or ZERO
        transfers_in = safe.transfers_in.aggregate(total=Sum('amount'))['total'] or ZERO
        transfers_out = safe.transfers_out.aggregate(total=Sum('amount'))['total'] or ZERO
        return safe.opening_balance + receipts - payments + transfers_in - transfers_out

    @staticmethod
    def get_cash_flow(from_date=None, to_date=None, safe=None):
        """حركة النقدية بالترتيب الزمني مع الرصيد التراكمي"""
        vouchers = Voucher.objects.select_related('safe')
        transfers = Transfer.objects.select_related('from_safe', 'to_safe')
        if safe is not None:
            vouchers = vouchers.filter(safe=safe)
            transfers = transfers.filter(Q(from_safe=safe) | Q(to_safe=safe))
        if from_date:
            vouchers = vouchers.filter(date__gte=from_date)
            transfers = transfers.filter(date__gte=from_date)
        if to_date:
            vouchers = vouchers.filter(date__lte=to_date)
            transfers = transfers.filter(date__lte=to_date)

        movements = []
        for voucher in vouchers:
            movements.append({
                'date': voucher.date,
                'description': voucher.description,
                'reference': voucher.voucher_number,
                'safe': voucher.safe.name,
                'amount_in': voucher.amount if voucher.is_receipt else ZERO,
                'amount_out': ZERO if voucher.is_receipt else voucher.amount,
            })
        for transfer in transfers:
            label = f'تحويل من {transfer.from_safe.name} إلى {transfer.to_safe.name}'
            if safe is None:
                # التحويل بين خزنتين لا يغير إجمالي النقدية
                amount_in = amount_out = transfer.amount
            else:
                amount_in = transfer.amount if transfer.to_safe_id == safe.pk else ZERO
                amount_out = transfer.amount if transfer.from_safe_id == safe.pk else ZERO
            movements.append({
                'date': transfer.date,
                'description': transfer.notes or label,
                'reference': label,
                'safe': transfer.from_safe.name,
                'amount_in': amount_in,
                'amount_out': amount_out,
            })

        movements.sort(key=lambda item: item['date'])

        running = ZERO
        for item in movements:
            running += item['amount_in'] - item['amount_out']
            item['balance'] = running

        return {
            'movements': movements,
            'total_in': sum((item['amount_in'] for item in movements), ZERO),
            'total_out': sum((item['amount_out'] for item in movements), ZERO),
            'balance': running,
        }

    @staticmethod
    def get_all_safes_summary():
        """ملخص جميع الخزائن"""
        safes = Safe.objects.all()
        summary = []
        total_balance = Decimal('0')

        for safe in safes:
            summary.append({
                'safe': safe,
                'balance': safe.balance,
                'ledger_balance': TreasuryService.get_ledger_balance(safe),
            })
            total_balance += safe.balance

        return {
            'safes': summary,
            'total_balance': total_balance,
        }
