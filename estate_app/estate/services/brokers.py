import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from ..models import Broker, BrokerDue, Voucher
from .audit import AuditService
from .money import ZERO
from .treasury import TreasuryService

logger = logging.getLogger(__name__)


class BrokerService:
    """خدمة السماسرة وعمولاتهم"""

    @staticmethod
    def create_broker(name, phone='', notes=''):
        name = (name or '').strip()
        if not name:
            raise ValidationError('الرجاء إدخال اسم السمسار.')
        if Broker.objects.filter(name__iexact=name).exists():
            raise ValidationError('هذا السمسار موجود بالفعل.')

        with transaction.atomic():
            broker = Broker.objects.create(name=name, phone=phone or '', notes=notes or '')
            # ربط العمولات السابقة المسجلة بنفس الاسم
            BrokerDue.objects.filter(broker__isnull=True, broker_name__iexact=name).update(broker=broker)
            AuditService.log_action('إضافة سمسار جديد', broker_id=broker.pk, name=name)
        return broker

    @staticmethod
    def pay_broker_due(due, payment_date=None):
        """صرف عمولة سمسار مستحقة من خزنة العمولة المحددة على العقد"""
        if due is None or due.status == BrokerDue.STATUS_PAID:
            raise ValidationError('هذه العمولة غير صالحة للدفع.')

        contract = due.contract
        if contract is None:
            raise ValidationError('لم يتم العثور على العقد المرتبط بهذه العمولة.')

        safe = contract.commission_safe
        if safe is None:
            raise ValidationError('لم يتم تحديد خزنة على العقد الأصلي. لا يمكن إتمام الدفع.')

        safe.refresh_from_db(fields=['balance'])
        if safe.balance < due.amount:
            raise ValidationError(f'رصيد الخزنة "{safe.name}" غير كافٍ.')

        payment_date = payment_date or timezone.localdate()
        with transaction.atomic():
            voucher = TreasuryService.create_voucher(
                voucher_type=Voucher.TYPE_PAYMENT,
                safe=safe,
                amount=due.amount,
                date=payment_date,
                description=f'صرف عمولة سمسار للوحدة {contract.unit.display_name}',
                party=due.broker_name,
                broker_due=due,
            )
            due.status = BrokerDue.STATUS_PAID
            due.payment_date = payment_date
            due.paid_from_safe = safe
            due.save(update_fields=['status', 'payment_date', 'paid_from_safe'])

            AuditService.log_action(
                'دفع عمولة سمسار مستحقة',
                broker_due_id=due.pk, safe_id=safe.pk, amount=due.amount
            )

        logger.info('Paid broker due %s (%s) from %s', due.pk, due.amount, safe.name)
        return voucher

    @staticmethod
    def get_broker_summary(broker):
        dues = BrokerDue.objects.filter(broker_name__iexact=broker.name)
        total_due = dues.filter(status=BrokerDue.STATUS_DUE).aggregate(total=Sum('amount'))['total'] or ZERO
        total_paid = dues.filter(status=BrokerDue.STATUS_PAID).aggregate(total=Sum('amount'))['total'] or ZERO
        return {
            'broker': broker,
            'dues': dues.select_related('contract'),
            'total_due': total_due,
            'total_paid': total_paid,
        }
