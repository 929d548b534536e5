import logging
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q, Sum
from django.utils import timezone

from ..models import Broker, BrokerDue, Contract, Installment, Unit, Voucher
from .audit import AuditService
from .money import ZERO, round_money, to_decimal
from .schedule import plan_installments
from .treasury import TreasuryService

logger = logging.getLogger(__name__)


class ContractService:
    """خدمة إدارة العقود والأقساط"""

    @staticmethod
    def create_contract(unit, customer, start_date=None, total_price=None,
                        down_payment=ZERO, discount_amount=ZERO, maintenance_deposit=ZERO,
                        payment_type=Contract.PAYMENT_INSTALLMENT, cadence='monthly',
                        installments_count=0, extra_annual=0, annual_payment_value=ZERO,
                        broker_name='', broker_percent=ZERO,
                        commission_safe=None, down_payment_safe=None):
        """إنشاء عقد جديد مع سند المقدم وعمولة السمسار وجدول الأقساط

        يتم التحقق من كل البيانات قبل أي تعديل، ثم تنفذ كل التعديلات
        داخل معاملة واحدة.
        """
        if unit is None or customer is None:
            raise ValidationError('الرجاء اختيار الوحدة والعميل.')

        start_date = start_date or timezone.localdate()
        total = round_money(total_price) if total_price is not None else unit.total_price
        down = round_money(down_payment)
        discount = round_money(discount_amount)
        deposit = round_money(maintenance_deposit)
        annual_value = round_money(annual_payment_value)
        broker_percent = to_decimal(broker_percent)
        broker_name = (broker_name or '').strip()

        if cadence not in Contract.CADENCE_MONTHS:
            raise ValidationError(f'نظام أقساط غير معروف: {cadence}')

        if payment_type == Contract.PAYMENT_INSTALLMENT and down >= total:
            payment_type = Contract.PAYMENT_CASH

        broker_amount = round_money(total * broker_percent / 100)
        if broker_amount > 0 and commission_safe is None:
            raise ValidationError('الرجاء تحديد الخزنة التي سيتم دفع العمولة منها.')
        if down > 0 and down_payment_safe is None:
            raise ValidationError('الرجاء تحديد الخزنة التي سيتم إيداع المقدم بها.')

        if unit.status not in (Unit.STATUS_AVAILABLE, Unit.STATUS_RESERVED):
            raise ValidationError('هذه الوحدة غير متاحة للبيع.')
        if Contract.objects.filter(unit=unit).exists():
            raise ValidationError('يوجد عقد قائم لهذه الوحدة بالفعل.')

        ContractService.validate_unit_partners(unit)

        max_extra = getattr(settings, 'ESTATE_MAX_EXTRA_ANNUAL', 3)
        extra_annual = min(max(int(extra_annual or 0), 0), max_extra)
        installments_count = int(installments_count or 0)

        plan = []
        if payment_type == Contract.PAYMENT_INSTALLMENT:
            if installments_count <= 0 and extra_annual <= 0:
                raise ValidationError('الرجاء إدخال عدد دفعات أو عدد دفعات سنوية.')
            if extra_annual > 0 and annual_value <= 0:
                raise ValidationError('الرجاء إدخال قيمة الدفعة السنوية.')
            plan = plan_installments(
                total_price=total,
                start_date=start_date,
                months=Contract.CADENCE_MONTHS[cadence],
                count=installments_count,
                discount=discount,
                down_payment=down,
                maintenance_deposit=deposit,
                extra_annual=extra_annual,
                annual_value=annual_value,
            )

        with transaction.atomic():
            contract = Contract.objects.create(
                code=ContractService.generate_contract_code(),
                unit=unit,
                customer=customer,
                total_price=total,
                discount_amount=discount,
                down_payment=down,
                maintenance_deposit=deposit,
                payment_type=payment_type,
                broker_name=broker_name,
                broker_percent=broker_percent,
                broker_amount=broker_amount,
                commission_safe=commission_safe,
                cadence=cadence,
                installments_count=installments_count,
                extra_annual=extra_annual,
                annual_payment_value=annual_value,
                start_date=start_date,
            )
            AuditService.log_action(
                'إنشاء عقد جديد',
                contract_id=contract.pk, unit_id=unit.pk, customer_id=customer.pk, price=total
            )

            if down > 0:
                TreasuryService.create_voucher(
                    voucher_type=Voucher.TYPE_RECEIPT,
                    safe=down_payment_safe,
                    amount=down,
                    date=start_date,
                    description=f'مقدم عقد للوحدة {unit.display_name}',
                    party=customer.name,
                    unit=unit,
                    contract=contract,
                )
                AuditService.log_action(
                    'إنشاء سند قبض للمقدم',
                    contract_id=contract.pk, amount=down, safe_id=down_payment_safe.pk
                )

            if broker_amount > 0:
                due = BrokerDue.objects.create(
                    contract=contract,
                    broker=Broker.objects.filter(name__iexact=broker_name).first() if broker_name else None,
                    broker_name=broker_name or 'سمسار غير محدد',
                    amount=broker_amount,
                    due_date=start_date,
                )
                AuditService.log_action(
                    'إنشاء عمولة مستحقة للسمسار',
                    broker_due_id=due.pk, contract_id=contract.pk, amount=broker_amount
                )

            if plan:
                ContractService.generate_installments(contract, plan)

            unit.mark_as_sold()

        logger.info('Contract %s created for unit %s', contract.code, unit.code)
        return contract

    @staticmethod
    def validate_unit_partners(unit):
        """مجموع نسب شركاء الوحدة يجب أن يساوي 100% بالضبط"""
        if not unit.partner_links.exists():
            raise ValidationError('لا يمكن إنشاء عقد. يجب تحديد شركاء لهذه الوحدة أولاً.')
        total_percent = unit.get_partners_total_percent()
        if total_percent != Decimal('100'):
            raise ValidationError(
                f'لا يمكن إنشاء عقد. مجموع نسب الشركاء هو {total_percent}% ويجب أن يكون 100% بالضبط.'
            )

    @staticmethod
    def generate_contract_code():
        last_contract = Contract.objects.order_by('-id').first()
        if last_contract and last_contract.code.startswith('CTR-'):
            try:
                return f"CTR-{int(last_contract.code.split('-')[1]) + 1:05d}"
            except (IndexError, ValueError):
                pass
        return f"CTR-{Contract.objects.count() + 1:05d}"

    @staticmethod
    def generate_installments(contract, plan=None):
        """توليد جدول الأقساط للعقد وحفظه"""
        if plan is None:
            plan = plan_installments(
                total_price=contract.total_price,
                start_date=contract.start_date,
                months=contract.cadence_months,
                count=contract.installments_count,
                discount=contract.discount_amount,
                down_payment=contract.down_payment,
                maintenance_deposit=contract.maintenance_deposit,
                extra_annual=contract.extra_annual,
                annual_value=contract.annual_payment_value,
            )

        installments = [
            Installment(
                unit=contract.unit,
                contract=contract,
                kind=line['kind'],
                amount=line['amount'],
                original_amount=line['amount'],
                due_date=line['due_date'],
                status=Installment.STATUS_UNPAID,
            )
            for line in plan
        ]
        Installment.objects.bulk_create(installments)
        return installments

    @staticmethod
    def get_linked_receipts(contract):
        """سندات القبض المرتبطة بالعقد مباشرة أو بأحد أقساطه"""
        return Voucher.objects.filter(type=Voucher.TYPE_RECEIPT).filter(
            Q(contract=contract) | Q(installment__contract=contract)
        )

    @staticmethod
    def delete_contract(contract, keep_commission=False):
        """حذف عقد وكل ما يتعلق به من سندات وأقساط"""
        unit = contract.unit
        broker_due = contract.broker_dues.first()
        commission_voucher = None
        if broker_due:
            commission_voucher = broker_due.vouchers.filter(type=Voucher.TYPE_PAYMENT).first()
        keep_commission = bool(commission_voucher) and keep_commission

        with transaction.atomic():
            AuditService.log_action(
                'حذف عقد وكل ما يتعلق به',
                contract_id=contract.pk, code=contract.code, unit_id=unit.pk,
                keep_commission=keep_commission
            )

            related = Voucher.objects.filter(
                Q(contract=contract) | Q(installment__contract=contract)
            ).exclude(broker_due__isnull=False)
            for voucher in related:
                TreasuryService.delete_voucher(voucher, log=False)

            if broker_due and not keep_commission:
                if commission_voucher:
                    TreasuryService.delete_voucher(commission_voucher, log=False)
                broker_due.delete()

            contract.installments.all().delete()
            contract.delete()
            unit.mark_as_available()

        logger.info('Contract %s deleted', contract.code)

    @staticmethod
    def get_contract_summary(contract):
        """ملخص مالي للعقد"""
        open_installments = contract.installments.exclude(status=Installment.STATUS_PAID)
        remaining_regular = open_installments.exclude(
            kind=Installment.KIND_MAINTENANCE
        ).aggregate(total=Sum('amount'))['total'] or ZERO
        remaining_maintenance = open_installments.filter(
            kind=Installment.KIND_MAINTENANCE
        ).aggregate(total=Sum('amount'))['total'] or ZERO
        total_paid = ContractService.get_linked_receipts(contract).aggregate(
            total=Sum('amount')
        )['total'] or ZERO

        return {
            'total_price': contract.total_price,
            'maintenance_deposit': contract.maintenance_deposit,
            'installment_base': contract.total_price - contract.maintenance_deposit,
            'discount_amount': contract.discount_amount,
            'down_payment': contract.down_payment,
            'installments_count': contract.installments.count(),
            'remaining_regular': remaining_regular,
            'remaining_maintenance': remaining_maintenance,
            'total_debt': remaining_regular + remaining_maintenance,
            'total_paid': total_paid,
        }
