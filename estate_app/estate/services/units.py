import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Sum

from ..models import Installment, PartnerDebt, Unit, UnitPartner, build_unit_code
from .audit import AuditService
from .money import ZERO, round_money, split_evenly, to_decimal

logger = logging.getLogger(__name__)


class UnitService:
    """خدمة إدارة الوحدات وشركائها"""

    @staticmethod
    def calc_remaining(unit):
        """المتبقي على الوحدة = (السعر - الخصم) - سندات القبض المرتبطة بالعقد

        لا يقل عن صفر، ويساوي صفر إذا لم يكن للوحدة عقد.
        """
        from .contracts import ContractService

        contract = unit.get_active_contract()
        if contract is None:
            return ZERO

        total_paid = ContractService.get_linked_receipts(contract).aggregate(
            total=Sum('amount')
        )['total'] or ZERO
        return max(ZERO, contract.get_total_owed() - total_paid)

    @staticmethod
    def _check_code(code, exclude_pk=None):
        units = Unit.objects.filter(code__iexact=code)
        if exclude_pk is not None:
            units = units.exclude(pk=exclude_pk)
        if units.exists():
            raise ValidationError('هذه الوحدة (نفس الاسم والدور والبرج) موجودة بالفعل.')

    @staticmethod
    def create_unit(name, floor, building, total_price, area='', unit_type='سكني',
                    notes='', partner_group=None):
        """إضافة وحدة جديدة وربطها بشركاء المجموعة المختارة"""
        name = (name or '').strip()
        floor = str(floor or '').strip()
        building = str(building or '').strip()
        if not name or not floor or not building:
            raise ValidationError('الرجاء إدخال اسم الوحدة والدور والبرج.')

        total_price = round_money(total_price)
        if total_price <= 0:
            raise ValidationError('الرجاء إدخال سعر الوحدة.')
        if not (unit_type or '').strip():
            raise ValidationError('الرجاء إدخال نوع الوحدة.')

        if partner_group is not None:
            partner_group.validate_total_percent()

        code = build_unit_code(building, floor, name)
        UnitService._check_code(code)

        with transaction.atomic():
            unit = Unit.objects.create(
                code=code,
                name=name,
                floor=floor,
                building=building,
                area=(area or '').strip(),
                unit_type=unit_type.strip(),
                total_price=total_price,
                notes=(notes or '').strip(),
            )
            AuditService.log_action('إضافة وحدة جديدة', unit_id=unit.pk, code=code)

            if partner_group is not None:
                UnitPartner.objects.bulk_create([
                    UnitPartner(unit=unit, partner=member.partner, percent=member.percent)
                    for member in partner_group.members.select_related('partner')
                ])
                AuditService.log_action(
                    'ربط مجموعة شركاء بوحدة',
                    unit_id=unit.pk, partner_group_id=partner_group.pk
                )

        return unit

    @staticmethod
    def update_unit(unit, name=None, floor=None, building=None, total_price=None,
                    area=None, status=None, notes=None):
        """تعديل بيانات الوحدة مع إعادة توليد الكود"""
        name = unit.name if name is None else name.strip()
        floor = unit.floor if floor is None else str(floor).strip()
        building = unit.building if building is None else str(building).strip()
        if not name or not floor or not building:
            raise ValidationError('الرجاء إدخال اسم الوحدة والدور والبرج.')

        if status is not None and status != unit.status:
            if status not in (Unit.STATUS_AVAILABLE, Unit.STATUS_RESERVED):
                raise ValidationError('يمكن تغيير حالة الوحدة إلى متاحة أو محجوزة فقط.')
            if unit.get_active_contract() is not None:
                raise ValidationError('لا يمكن تغيير حالة وحدة مرتبطة بعقد قائم.')

        code = build_unit_code(building, floor, name)
        UnitService._check_code(code, exclude_pk=unit.pk)

        unit.name = name
        unit.floor = floor
        unit.building = building
        unit.code = code
        if total_price is not None:
            unit.total_price = round_money(total_price)
        if area is not None:
            unit.area = area.strip()
        if status is not None:
            unit.status = status
        if notes is not None:
            unit.notes = notes.strip()

        with transaction.atomic():
            unit.save()
            AuditService.log_action(
                'تعديل بيانات الوحدة',
                unit_id=unit.pk, name=name, floor=floor, building=building, price=unit.total_price
            )
        return unit

    @staticmethod
    def add_partner(unit, partner, percent):
        """ربط شريك بالوحدة بنسبة معينة"""
        percent = to_decimal(percent)
        if partner is None or percent <= 0:
            raise ValidationError('الرجاء اختيار شريك وإدخال نسبة صحيحة.')
        if unit.partner_links.filter(partner=partner).exists():
            raise ValidationError('هذا الشريك تم إضافته بالفعل لهذه الوحدة.')

        current_total = unit.get_partners_total_percent()
        if current_total + percent > 100:
            raise ValidationError(
                f'خطأ: لا يمكن إضافة هذه النسبة. الإجمالي الحالي هو {current_total}%. '
                f'إضافة {percent}% سيجعل المجموع يتجاوز 100%.'
            )

        with transaction.atomic():
            link = UnitPartner.objects.create(unit=unit, partner=partner, percent=percent)
            AuditService.log_action(
                'ربط شريك بوحدة',
                unit_id=unit.pk, partner_id=partner.pk, percent=percent
            )
        return link

    @staticmethod
    def update_partner_percent(link, percent):
        percent = to_decimal(percent)
        if percent <= 0:
            raise ValidationError('الرجاء إدخال نسبة مئوية صحيحة.')

        others_total = UnitPartner.objects.filter(unit=link.unit_id).exclude(
            pk=link.pk
        ).aggregate(total=Sum('percent'))['total'] or ZERO
        if others_total + percent > 100:
            raise ValidationError(
                f'لا يمكن حفظ هذه النسبة. مجموع نسب الشركاء الآخرين هو {others_total}%. '
                f'إضافة {percent}% سيجعل المجموع يتجاوز 100%.'
            )

        with transaction.atomic():
            link.percent = percent
            link.save(update_fields=['percent'])
            AuditService.log_action('تعديل نسبة الشريك', unit_partner_id=link.pk, percent=percent)
        return link

    @staticmethod
    def remove_partner(link):
        with transaction.atomic():
            AuditService.log_action(
                'حذف ربط شريك بوحدة',
                unit_id=link.unit_id, partner_id=link.partner_id, percent=link.percent
            )
            link.delete()

    @staticmethod
    def execute_return(unit, buying_partner):
        """إرجاع وحدة مباعة وشرائها من أحد شركائها

        يحذف العقد والأقساط غير المسددة، وينشئ على الشريك المشتري ديناً
        لكل شريك بائع بقيمة (سعر العقد × نسبته)، مقسماً على نفس عدد أقساط
        الجدول الأصلي وبنفس تواريخ استحقاقها.
        """
        contract = unit.get_active_contract()
        if unit.status != Unit.STATUS_SOLD or contract is None:
            raise ValidationError('يمكن تنفيذ هذه العملية على الوحدات المباعة فقط.')

        original_links = list(unit.partner_links.select_related('partner'))
        if not original_links:
            raise ValidationError('لا يوجد شركاء مرتبطون بهذه الوحدة. لا يمكن إتمام العملية.')
        if buying_partner is None or not any(
                link.partner_id == buying_partner.pk for link in original_links):
            raise ValidationError('الشريك المشتري يجب أن يكون من شركاء الوحدة.')

        schedule_basis = list(
            Installment.objects.filter(unit=unit).order_by('due_date', 'id').values_list('due_date', flat=True)
        )
        sellers = [link for link in original_links if link.partner_id != buying_partner.pk]

        with transaction.atomic():
            AuditService.log_action(
                'إرجاع وحدة وشراء شريك',
                unit_id=unit.pk, contract_id=contract.pk, buying_partner_id=buying_partner.pk
            )

            Installment.objects.filter(unit=unit).exclude(
                status=Installment.STATUS_PAID
            ).delete()
            # الأقساط المسددة تبقى على الوحدة بدون عقد
            Installment.objects.filter(unit=unit, contract=contract).update(contract=None)
            total_price = contract.total_price
            contract.delete()

            debts = []
            if schedule_basis:
                for seller in sellers:
                    debt_owed = round_money(total_price * seller.percent / Decimal('100'))
                    amounts = split_evenly(debt_owed, len(schedule_basis))
                    for due_date, amount in zip(schedule_basis, amounts):
                        debts.append(PartnerDebt(
                            unit=unit,
                            paying_partner=buying_partner,
                            owed_partner=seller.partner,
                            amount=amount,
                            due_date=due_date,
                        ))
                PartnerDebt.objects.bulk_create(debts)

            unit.partner_links.all().delete()
            UnitPartner.objects.create(unit=unit, partner=buying_partner, percent=Decimal('100'))
            unit.mark_as_available()

        logger.info(
            'Unit %s returned and bought by partner %s (%d debts)',
            unit.code, buying_partner.name, len(debts)
        )
        return debts
