import logging
from datetime import timedelta

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from ..models import Installment, Safe, Voucher
from .audit import AuditService
from .money import PAID_EPSILON, ZERO, round_money, split_evenly
from .treasury import TreasuryService

logger = logging.getLogger(__name__)


class InstallmentService:
    """خدمة إدارة الأقساط والدفعات"""

    @staticmethod
    def process_payment(unit, amount, payment_date, safe, installment=None, notes=''):
        """معالجة دفعة على وحدة

        المبلغ يدخل الخزنة بسند قبض واحد، ثم يوزع على أقساط الوحدة غير
        المسددة من الأقدم للأحدث بغض النظر عن القسط المختار.
        ما يزيد عن إجمالي المديونية يرجع في المفتاح overpayment.
        """
        if unit is None or amount in (None, '') or payment_date is None or safe is None:
            raise ValidationError('الرجاء إدخال كل البيانات المطلوبة.')

        amount = round_money(amount)
        if amount <= 0:
            raise ValidationError('الرجاء إدخال مبلغ صحيح أكبر من صفر.')
        if safe.pk is None or not Safe.objects.filter(pk=safe.pk).exists():
            raise ValidationError('الخزنة المختارة غير موجودة.')
        if installment is not None and installment.unit_id != unit.pk:
            raise ValidationError('القسط المختار لا يخص هذه الوحدة.')

        contract = unit.get_active_contract()

        with transaction.atomic():
            voucher = TreasuryService.create_voucher(
                voucher_type=Voucher.TYPE_RECEIPT,
                safe=safe,
                amount=amount,
                date=payment_date,
                description=notes or f'سداد دفعة للوحدة {unit.display_name}',
                party=contract.customer.name if contract else '',
                unit=unit,
                contract=contract,
                installment=installment,
            )

            left = amount
            touched = []
            for item in Installment.open_for_unit(unit):
                if left <= 0:
                    break
                applied = min(left, item.amount)
                item.amount -= applied
                left -= applied
                if item.amount <= PAID_EPSILON:
                    item.amount = ZERO
                    item.status = Installment.STATUS_PAID
                    item.payment_date = payment_date
                else:
                    item.status = Installment.STATUS_PARTIAL
                item.save(update_fields=['amount', 'status', 'payment_date'])
                touched.append(item)

            AuditService.log_action(
                'تسجيل دفعة على وحدة',
                unit_id=unit.pk, voucher_id=voucher.pk, amount=amount, safe_id=safe.pk,
                installments=[item.pk for item in touched]
            )

        overpayment = left if left > 0 else ZERO
        if overpayment:
            logger.warning(
                'Payment of %s on unit %s exceeds open installments by %s',
                amount, unit.code, overpayment
            )

        return {
            'voucher': voucher,
            'installments': touched,
            'overpayment': overpayment,
        }

    @staticmethod
    def refresh_status(installment, today=None):
        """تحديد حالة القسط من المتبقي والمسدد"""
        if installment.amount <= PAID_EPSILON:
            installment.amount = ZERO
            installment.status = Installment.STATUS_PAID
            installment.payment_date = installment.payment_date or today or timezone.localdate()
        elif installment.paid_amount > 0:
            installment.status = Installment.STATUS_PARTIAL
        else:
            installment.status = Installment.STATUS_UNPAID

    @staticmethod
    def reschedule_installment(installment, new_amount=None, new_due_date=None):
        """تعديل مبلغ أو تاريخ قسط وتوزيع الفرق على الأقساط التالية

        الفرق (القديم - الجديد) يقسم بالتساوي على الأقساط غير المسددة التي
        تليه في ترتيب الاستحقاق، والأخير يأخذ باقي القسمة.
        """
        if installment.is_paid:
            raise ValidationError('لا يمكن تعديل قسط مسدد بالكامل.')

        old_amount = installment.amount
        new_amount = old_amount if new_amount in (None, '') else round_money(new_amount)
        if new_amount < 0:
            raise ValidationError('المبلغ الجديد لا يمكن أن يكون سالباً.')

        delta = old_amount - new_amount
        later = list(
            Installment.open_for_unit(installment.unit).exclude(pk=installment.pk).filter(
                Q(due_date__gt=installment.due_date) |
                Q(due_date=installment.due_date, id__gt=installment.pk)
            )
        )

        shares = split_evenly(delta, len(later)) if delta and later else []
        for item, share in zip(later, shares):
            if item.amount + share < 0:
                raise ValidationError(
                    'لا يمكن توزيع الفرق لأن أحد الأقساط التالية سيصبح بقيمة سالبة.'
                )

        with transaction.atomic():
            installment.original_amount += new_amount - old_amount
            installment.amount = new_amount
            if new_due_date:
                installment.due_date = new_due_date
            InstallmentService.refresh_status(installment)
            installment.save(update_fields=['amount', 'original_amount', 'due_date', 'status', 'payment_date'])

            for item, share in zip(later, shares):
                item.amount += share
                item.original_amount += share
                InstallmentService.refresh_status(item)
                item.save(update_fields=['amount', 'original_amount', 'status', 'payment_date'])

            AuditService.log_action(
                'تعديل قسط',
                installment_id=installment.pk, old_amount=old_amount, new_amount=new_amount,
                due_date=installment.due_date, redistributed=delta if shares else ZERO
            )

        return [installment] + later[:len(shares)]

    @staticmethod
    def get_overdue_installments(today=None):
        """الأقساط المتأخرة"""
        today = today or timezone.localdate()
        return Installment.objects.filter(
            due_date__lt=today
        ).exclude(
            status=Installment.STATUS_PAID
        ).select_related('unit', 'contract__customer')

    @staticmethod
    def get_upcoming_installments(days=7, today=None):
        """الأقساط المستحقة خلال عدد معين من الأيام"""
        today = today or timezone.localdate()
        end_date = today + timedelta(days=days)

        return Installment.objects.filter(
            due_date__gte=today,
            due_date__lte=end_date
        ).exclude(
            status=Installment.STATUS_PAID
        ).select_related('unit', 'contract__customer')
