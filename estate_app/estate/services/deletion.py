import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from ..models import (
    Broker, BrokerDue, Contract, Customer, Partner, PartnerGroup, Safe, Unit, Voucher
)
from .audit import AuditService
from .contracts import ContractService
from .treasury import TreasuryService

logger = logging.getLogger(__name__)


def _customer_guard(customer):
    if customer.contracts.exists():
        return 'لا يمكن حذف هذا العميل لأنه مرتبط بعقود قائمة. يجب حذف العقود أولاً.'


def _unit_guard(unit):
    if Contract.objects.filter(unit=unit).exists():
        return 'لا يمكن حذف هذه الوحدة لأنها مرتبطة بعقد قائم. يجب حذف العقد أولاً.'


def _safe_guard(safe):
    if safe.balance != 0:
        return 'لا يمكن حذف خزنة رصيدها لا يساوي صفر.'
    if safe.vouchers.exists() or safe.transfers_in.exists() or safe.transfers_out.exists():
        return 'لا يمكن حذف هذه الخزنة لأنها مرتبطة بسندات أو تحويلات.'


def _partner_guard(partner):
    if partner.unit_links.exists():
        return 'لا يمكن حذف هذا الشريك لأنه مرتبط بوحدات.'
    if partner.group_memberships.exists():
        return 'لا يمكن حذف هذا الشريك لأنه عضو في مجموعة شركاء.'
    if partner.debts_to_pay.exists() or partner.debts_owed.exists():
        return 'لا يمكن حذف هذا الشريك لأنه مرتبط بديون شركاء.'


def _broker_guard(broker):
    if BrokerDue.objects.filter(broker_name__iexact=broker.name, status=BrokerDue.STATUS_DUE).exists():
        return 'لا يمكن حذف هذا السمسار لأن له عمولات مستحقة لم تدفع.'


# شروط الحذف لكل نوع
DELETE_GUARDS = {
    Customer: _customer_guard,
    Unit: _unit_guard,
    Safe: _safe_guard,
    Partner: _partner_guard,
    Broker: _broker_guard,
}

# أنواع لها طريقة حذف خاصة بدلاً من obj.delete()
DELETE_ACTIONS = {
    Contract: lambda contract, **options: ContractService.delete_contract(
        contract, keep_commission=options.get('keep_commission', False)
    ),
    Voucher: lambda voucher, **options: TreasuryService.delete_voucher(voucher),
}

DELETABLE_TYPES = tuple(DELETE_GUARDS) + tuple(DELETE_ACTIONS) + (PartnerGroup,)


class DeletionService:
    """خدمة الحذف الموحدة لكل أنواع البيانات"""

    @staticmethod
    def can_delete(obj):
        """يرجع (True, None) أو (False, سبب المنع)"""
        model = type(obj)
        if model not in DELETABLE_TYPES:
            return False, f'لا يمكن حذف {model._meta.verbose_name} من هنا.'
        guard = DELETE_GUARDS.get(model)
        reason = guard(obj) if guard else None
        return reason is None, reason

    @staticmethod
    def delete(obj, **options):
        allowed, reason = DeletionService.can_delete(obj)
        if not allowed:
            raise ValidationError(reason)

        model = type(obj)
        action = DELETE_ACTIONS.get(model)
        if action is not None:
            action(obj, **options)
            return

        label = model._meta.verbose_name
        with transaction.atomic():
            AuditService.log_action(
                f'حذف {label}',
                model=model.__name__, object_id=obj.pk, name=str(obj)
            )
            obj.delete()
        logger.info('Deleted %s %s', model.__name__, obj)
