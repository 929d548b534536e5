from decimal import Decimal

from django.conf import settings
from django.db.models import Count, Sum
from django.utils import timezone

from ..models import Contract, Installment, PartnerDebt, Safe, Unit, Voucher
from .installments import InstallmentService
from .money import ZERO, round_money
from .units import UnitService


class ReportService:
    """خدمة التقارير ولوحة المتابعة"""

    @staticmethod
    def dashboard_summary():
        """ملخص لوحة المتابعة"""
        total_sales = Contract.objects.aggregate(total=Sum('total_price'))['total'] or ZERO
        total_receipts = Voucher.objects.filter(
            type=Voucher.TYPE_RECEIPT
        ).aggregate(total=Sum('amount'))['total'] or ZERO
        total_expenses = Voucher.objects.filter(
            type=Voucher.TYPE_PAYMENT
        ).aggregate(total=Sum('amount'))['total'] or ZERO

        collection_percentage = ZERO
        if total_sales:
            collection_percentage = round_money(total_receipts / total_sales * Decimal('100'))

        status_counts = dict(
            Unit.objects.values_list('status').annotate(count=Count('id')).order_by()
        )
        unit_counts = {
            'total': sum(status_counts.values()),
            'available': status_counts.get(Unit.STATUS_AVAILABLE, 0),
            'reserved': status_counts.get(Unit.STATUS_RESERVED, 0),
            'sold': status_counts.get(Unit.STATUS_SOLD, 0),
            'returned': status_counts.get(Unit.STATUS_RETURNED, 0),
        }

        total_debt = sum(
            (UnitService.calc_remaining(unit) for unit in Unit.objects.filter(contract__isnull=False)),
            ZERO
        )

        return {
            'total_sales': total_sales,
            'total_receipts': total_receipts,
            'total_expenses': total_expenses,
            'net_profit': total_receipts - total_expenses,
            'collection_percentage': collection_percentage,
            'units': unit_counts,
            'total_debt': total_debt,
            'safes_balance': Safe.objects.aggregate(total=Sum('balance'))['total'] or ZERO,
            'open_partner_debts': PartnerDebt.objects.filter(
                status=PartnerDebt.STATUS_UNPAID
            ).aggregate(total=Sum('amount'))['total'] or ZERO,
        }

    @staticmethod
    def overdue_installments(today=None):
        return InstallmentService.get_overdue_installments(today)

    @staticmethod
    def due_soon_installments(days=None, today=None):
        if days is None:
            days = getattr(settings, 'ESTATE_DUE_SOON_DAYS', 7)
        return InstallmentService.get_upcoming_installments(days, today)

    @staticmethod
    def installments_report(status=None, from_date=None, to_date=None, unit=None):
        installments = Installment.objects.select_related('unit', 'contract__customer')
        if status:
            installments = installments.filter(status=status)
        if from_date:
            installments = installments.filter(due_date__gte=from_date)
        if to_date:
            installments = installments.filter(due_date__lte=to_date)
        if unit is not None:
            installments = installments.filter(unit=unit)

        totals = installments.aggregate(
            original=Sum('original_amount'),
            remaining=Sum('amount'),
        )
        original = totals['original'] or ZERO
        remaining = totals['remaining'] or ZERO
        return {
            'installments': installments,
            'total_original': original,
            'total_remaining': remaining,
            'total_paid': original - remaining,
            'generated_at': timezone.now(),
        }
