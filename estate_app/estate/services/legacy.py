"""استيراد بيانات النسخة القديمة (ملف الحالة المحفوظ في المتصفح)

الملف عبارة عن JSON واحد بمفاتيح customers و units و contracts ... إلخ،
وقد يكون ملفوفاً داخل المفتاح estate_pro_final_v3 كنص.
"""
import json
import logging

from django.conf import settings
from django.db import transaction
from django.db.models import Sum
from django.utils.dateparse import parse_date, parse_datetime
from django.utils import timezone

from ..models import (
    AuditLog, Broker, BrokerDue, Contract, Customer, Installment, Partner,
    PartnerDebt, PartnerGroup, PartnerGroupMember, Safe, Transfer, Unit,
    UnitPartner, Voucher, build_unit_code
)
from .money import ZERO, round_money, to_decimal

logger = logging.getLogger(__name__)

LEGACY_KEY = 'estate_pro_final_v3'

UNIT_STATUSES = {
    'متاحة': Unit.STATUS_AVAILABLE,
    'محجوزة': Unit.STATUS_RESERVED,
    'مباعة': Unit.STATUS_SOLD,
    'مرتجعة': Unit.STATUS_RETURNED,
}

INSTALLMENT_STATUSES = {
    'غير مدفوع': Installment.STATUS_UNPAID,
    'مدفوع جزئياً': Installment.STATUS_PARTIAL,
    'مدفوع': Installment.STATUS_PAID,
}

INSTALLMENT_KINDS = {
    'دفعة سنوية': Installment.KIND_ANNUAL,
    'دفعة صيانة': Installment.KIND_MAINTENANCE,
}

CADENCES = {
    'شهري': 'monthly',
    'ربع سنوي': 'quarterly',
    'نصف سنوي': 'semiannual',
    'سنوي': 'annual',
}

CUSTOMER_STATUSES = {
    'نشط': 'active',
    'غير نشط': 'inactive',
}


def load_legacy_state(text):
    """قراءة نص ملف الحالة القديم"""
    data = json.loads(text) or {}
    if isinstance(data.get(LEGACY_KEY), str):
        data = json.loads(data[LEGACY_KEY]) or {}
    return data


def _date(value):
    if not value:
        return None
    try:
        return parse_date(str(value)[:10])
    except ValueError:
        # تاريخ بصيغة صحيحة لكنه غير موجود مثل 2024-02-30
        logger.warning('Ignoring invalid legacy date %r', value)
        return None


class LegacyStateImporter:
    """تحويل حالة النسخة القديمة إلى سجلات في قاعدة البيانات"""

    def __init__(self, state):
        self.state = state or {}
        self.customers = {}
        self.units = {}
        self.partners = {}
        self.safes = {}
        self.contracts = {}
        self.contracts_by_unit = {}
        self.installments = {}
        self.broker_dues = {}
        self.counts = {}

    def _items(self, key):
        return self.state.get(key) or []

    def _count(self, key, value):
        self.counts[key] = value

    @transaction.atomic
    def run(self):
        self.import_customers()
        self.import_partners()
        self.import_units()
        self.import_partner_groups()
        self.import_safes()
        self.import_contracts()
        self.import_installments()
        self.import_broker_dues()
        self.import_brokers()
        self.import_vouchers()
        self.import_transfers()
        self.import_partner_debts()
        self.fix_opening_balances()
        self.import_audit_log()
        logger.info('Legacy state imported: %s', self.counts)
        return self.counts

    def import_customers(self):
        for item in self._items('customers'):
            self.customers[item.get('id')] = Customer.objects.create(
                name=item.get('name') or '',
                phone=item.get('phone') or '',
                national_id=item.get('nationalId') or '',
                address=item.get('address') or '',
                status=CUSTOMER_STATUSES.get(item.get('status') or 'نشط', 'active'),
                notes=item.get('notes') or '',
            )
        self._count('customers', len(self.customers))

    def import_partners(self):
        for item in self._items('partners'):
            self.partners[item.get('id')] = Partner.objects.create(
                name=item.get('name') or '',
                phone=item.get('phone') or '',
                notes=item.get('notes') or '',
            )
        self._count('partners', len(self.partners))

    def _unique_code(self, code):
        candidate = code
        suffix = 2
        while Unit.objects.filter(code__iexact=candidate).exists():
            candidate = f'{code}-{suffix}'
            suffix += 1
        return candidate

    def import_units(self):
        for item in self._items('units'):
            plans = item.get('plans') or []
            if plans:
                total_price = plans[0].get('price')
            else:
                total_price = item.get('totalPrice', 0)

            code = item.get('code') or build_unit_code(
                item.get('building'), item.get('floor'), item.get('name')
            )
            self.units[item.get('id')] = Unit.objects.create(
                code=self._unique_code(code),
                name=item.get('name') or '',
                floor=str(item.get('floor') or ''),
                building=str(item.get('building') or ''),
                area=str(item.get('area') or ''),
                unit_type=item.get('unitType') or 'سكني',
                total_price=round_money(total_price),
                status=UNIT_STATUSES.get(item.get('status'), Unit.STATUS_AVAILABLE),
                notes=item.get('notes') or '',
            )

        links = 0
        for item in self._items('unitPartners'):
            unit = self.units.get(item.get('unitId'))
            partner = self.partners.get(item.get('partnerId'))
            if unit is None or partner is None:
                logger.warning('Skipping unit partner link %s with unknown references', item.get('id'))
                continue
            UnitPartner.objects.create(unit=unit, partner=partner, percent=to_decimal(item.get('percent')))
            links += 1

        self._count('units', len(self.units))
        self._count('unit_partners', links)

    def import_partner_groups(self):
        groups = 0
        for item in self._items('partnerGroups'):
            group = PartnerGroup.objects.create(name=item.get('name') or f'مجموعة {groups + 1}')
            for member in item.get('partners') or []:
                partner = self.partners.get(member.get('partnerId'))
                if partner is not None:
                    PartnerGroupMember.objects.create(
                        group=group, partner=partner, percent=to_decimal(member.get('percent'))
                    )
            groups += 1
        self._count('partner_groups', groups)

    def import_safes(self):
        safes = self._items('safes')
        if not safes:
            safes = [{'id': None, 'name': getattr(settings, 'ESTATE_DEFAULT_SAFE_NAME', 'الخزنة الرئيسية'), 'balance': 0}]

        for item in safes:
            balance = round_money(item.get('balance') or 0)
            self.safes[item.get('id')] = Safe.objects.create(
                name=item.get('name') or 'خزنة',
                opening_balance=balance,
                balance=balance,
            )
        self._count('safes', len(self.safes))

    def import_contracts(self):
        unit_ids_with_installments = {item.get('unitId') for item in self._items('installments')}

        for item in self._items('contracts'):
            unit = self.units.get(item.get('unitId'))
            customer = self.customers.get(item.get('customerId'))
            if unit is None or customer is None:
                logger.warning('Skipping contract %s with unknown unit or customer', item.get('code'))
                continue

            total_price = round_money(item.get('totalPrice'))
            down_payment = round_money(item.get('downPayment'))
            payment_type = item.get('paymentType')
            if payment_type not in (Contract.PAYMENT_INSTALLMENT, Contract.PAYMENT_CASH):
                payment_type = Contract.PAYMENT_INSTALLMENT
                if item.get('unitId') not in unit_ids_with_installments and down_payment >= total_price:
                    payment_type = Contract.PAYMENT_CASH

            code = item.get('code') or f'CTR-{len(self.contracts) + 1:05d}'
            if Contract.objects.filter(code=code).exists():
                code = f'{code}-{item.get("id")}'

            contract = Contract.objects.create(
                code=code,
                unit=unit,
                customer=customer,
                total_price=total_price,
                discount_amount=round_money(item.get('discountAmount') or 0),
                down_payment=down_payment,
                maintenance_deposit=round_money(item.get('maintenanceDeposit') or 0),
                payment_type=payment_type,
                broker_name=item.get('brokerName') or '',
                broker_percent=to_decimal(item.get('brokerPercent') or 0),
                broker_amount=round_money(item.get('brokerAmount') or 0),
                commission_safe=self.safes.get(item.get('commissionSafeId')),
                cadence=CADENCES.get(item.get('type'), 'monthly'),
                installments_count=int(item.get('count') or 0),
                extra_annual=min(max(int(item.get('extraAnnual') or 0), 0), 3),
                annual_payment_value=round_money(item.get('annualPaymentValue') or 0),
                start_date=_date(item.get('start')) or timezone.localdate(),
            )
            self.contracts[item.get('id')] = contract
            self.contracts_by_unit[item.get('unitId')] = contract
        self._count('contracts', len(self.contracts))

    def import_installments(self):
        for item in self._items('installments'):
            unit = self.units.get(item.get('unitId'))
            if unit is None:
                continue
            amount = round_money(item.get('amount'))
            original = item.get('originalAmount')
            status = INSTALLMENT_STATUSES.get(item.get('status'), Installment.STATUS_UNPAID)
            self.installments[item.get('id')] = Installment.objects.create(
                unit=unit,
                contract=self.contracts_by_unit.get(item.get('unitId')),
                kind=INSTALLMENT_KINDS.get(item.get('type'), Installment.KIND_REGULAR),
                amount=amount,
                original_amount=amount if original is None else round_money(original),
                due_date=_date(item.get('dueDate')) or timezone.localdate(),
                payment_date=_date(item.get('paymentDate')),
                status=status,
            )
        self._count('installments', len(self.installments))

    def import_broker_dues(self):
        for item in self._items('brokerDues'):
            status = BrokerDue.STATUS_PAID if item.get('status') == 'paid' else BrokerDue.STATUS_DUE
            self.broker_dues[item.get('id')] = BrokerDue.objects.create(
                contract=self.contracts.get(item.get('contractId')),
                broker_name=item.get('brokerName') or 'سمسار غير محدد',
                amount=round_money(item.get('amount')),
                due_date=_date(item.get('dueDate')) or timezone.localdate(),
                status=status,
                payment_date=_date(item.get('paymentDate')),
                paid_from_safe=self.safes.get(item.get('paidFromSafeId')),
            )
        self._count('broker_dues', len(self.broker_dues))

    def import_brokers(self):
        brokers = list(self._items('brokers'))
        if not brokers:
            names = [item.get('brokerName') for item in self._items('contracts')]
            names += [item.get('brokerName') for item in self._items('brokerDues')]
            brokers = [{'name': name} for name in dict.fromkeys(filter(None, names))]

        created = 0
        for item in brokers:
            name = (item.get('name') or '').strip()
            if not name or Broker.objects.filter(name__iexact=name).exists():
                continue
            broker = Broker.objects.create(name=name, phone=item.get('phone') or '', notes=item.get('notes') or '')
            BrokerDue.objects.filter(broker_name__iexact=name).update(broker=broker)
            created += 1
        self._count('brokers', created)

    def _legacy_vouchers(self):
        vouchers = list(self._items('vouchers'))
        if vouchers or not self._items('payments'):
            return vouchers

        # النسخ الأقدم كانت تحفظ الدفعات بدون سندات
        units_by_id = {item.get('id'): item for item in self._items('units')}
        contracts_by_unit = {item.get('unitId'): item for item in self._items('contracts')}
        customers_by_id = {item.get('id'): item for item in self._items('customers')}
        for payment in self._items('payments'):
            unit = units_by_id.get(payment.get('unitId'))
            contract = contracts_by_unit.get(payment.get('unitId'))
            customer = customers_by_id.get(contract.get('customerId')) if contract else None
            vouchers.append({
                'type': 'receipt',
                'date': payment.get('date'),
                'amount': payment.get('amount'),
                'safeId': payment.get('safeId'),
                'description': f"دفعة للوحدة {unit.get('code') if unit else 'غير معروفة'}",
                'payer': customer.get('name') if customer else 'غير محدد',
                'linked_ref': payment.get('unitId'),
            })
        for contract in self._items('contracts'):
            if to_decimal(contract.get('brokerAmount') or 0) > 0:
                unit = units_by_id.get(contract.get('unitId'))
                vouchers.append({
                    'type': 'payment',
                    'date': contract.get('start'),
                    'amount': contract.get('brokerAmount'),
                    'safeId': contract.get('commissionSafeId'),
                    'description': f"عمولة سمسار للوحدة {unit.get('code') if unit else 'غير معروفة'}",
                    'beneficiary': contract.get('brokerName') or 'سمسار',
                    'linked_ref': contract.get('id'),
                })
        return vouchers

    def _resolve_links(self, ref, voucher_type):
        """تحويل linked_ref القديم إلى روابط العقد والقسط والعمولة والوحدة"""
        links = {}
        if ref in self.contracts:
            contract = self.contracts[ref]
            links.update(contract=contract, unit=contract.unit)
            if voucher_type == Voucher.TYPE_PAYMENT:
                due = contract.broker_dues.first()
                if due is not None:
                    links['broker_due'] = due
        elif ref in self.installments:
            installment = self.installments[ref]
            links.update(installment=installment, unit=installment.unit, contract=installment.contract)
        elif ref in self.broker_dues:
            due = self.broker_dues[ref]
            links.update(broker_due=due, contract=due.contract)
        elif ref in self.units:
            links.update(unit=self.units[ref], contract=self.contracts_by_unit.get(ref))
        return links

    def import_vouchers(self):
        default_safe = next(iter(self.safes.values()))
        created = 0
        for item in self._legacy_vouchers():
            amount = round_money(item.get('amount'))
            if amount <= 0:
                continue
            voucher_type = Voucher.TYPE_PAYMENT if item.get('type') == 'payment' else Voucher.TYPE_RECEIPT
            Voucher.objects.create(
                type=voucher_type,
                date=_date(item.get('date')) or timezone.localdate(),
                amount=amount,
                safe=self.safes.get(item.get('safeId'), default_safe),
                description=item.get('description') or '',
                party=item.get('payer') or item.get('beneficiary') or '',
                **self._resolve_links(item.get('linked_ref'), voucher_type)
            )
            created += 1
        self._count('vouchers', created)

    def import_transfers(self):
        created = 0
        for item in self._items('transfers'):
            from_safe = self.safes.get(item.get('fromSafeId'))
            to_safe = self.safes.get(item.get('toSafeId'))
            if from_safe is None or to_safe is None:
                continue
            Transfer.objects.create(
                from_safe=from_safe,
                to_safe=to_safe,
                amount=round_money(item.get('amount')),
                date=_date(item.get('date')) or timezone.localdate(),
                notes=item.get('notes') or '',
            )
            created += 1
        self._count('transfers', created)

    def import_partner_debts(self):
        created = 0
        for item in self._items('partnerDebts'):
            unit = self.units.get(item.get('unitId'))
            paying = self.partners.get(item.get('payingPartnerId'))
            owed = self.partners.get(item.get('owedPartnerId'))
            if unit is None or paying is None or owed is None:
                continue
            PartnerDebt.objects.create(
                unit=unit,
                paying_partner=paying,
                owed_partner=owed,
                amount=round_money(item.get('amount')),
                due_date=_date(item.get('dueDate')) or timezone.localdate(),
                status=PartnerDebt.STATUS_PAID if item.get('status') == 'مدفوع' else PartnerDebt.STATUS_UNPAID,
                payment_date=_date(item.get('paymentDate')),
            )
            created += 1
        self._count('partner_debts', created)

    def fix_opening_balances(self):
        """الرصيد القديم هو الرصيد الحالي، فالرصيد الافتتاحي = الحالي - صافي الحركات"""
        for safe in self.safes.values():
            receipts = safe.vouchers.filter(type=Voucher.TYPE_RECEIPT).aggregate(t=Sum('amount'))['t'] or ZERO
            payments = safe.vouchers.filter(type=Voucher.TYPE_PAYMENT).aggregate(t=Sum('amount'))['t'] or ZERO
            transfers_in = safe.transfers_in.aggregate(t=Sum('amount'))['t'] or ZERO
            transfers_out = safe.transfers_out.aggregate(t=Sum('amount'))['t'] or ZERO
            safe.opening_balance = safe.balance - (receipts - payments + transfers_in - transfers_out)
            safe.save(update_fields=['opening_balance'])

    def import_audit_log(self):
        created = 0
        for item in self._items('auditLog'):
            entry = AuditLog.objects.create(
                description=item.get('description') or '',
                details=item.get('details') or {},
            )
            timestamp = parse_datetime(item.get('timestamp') or '')
            if timestamp is not None:
                if timezone.is_naive(timestamp):
                    timestamp = timezone.make_aware(timestamp)
                AuditLog.objects.filter(pk=entry.pk).update(timestamp=timestamp)
            created += 1
        self._count('audit_log', created)
