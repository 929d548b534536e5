from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db.models import Sum

from ...models import Installment, Safe, Unit
from ...services.money import PAID_EPSILON


class Command(BaseCommand):
    help = 'يفحص تكامل وصحة البيانات في النظام'

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS('جاري فحص تكامل البيانات...\n'))

        errors = []
        warnings = []

        # فحص الأقساط
        self.stdout.write('🔍 فحص الأقساط...')
        installment_issues = self._check_installments()
        errors.extend(installment_issues['errors'])
        warnings.extend(installment_issues['warnings'])

        # فحص نسب الشركاء
        self.stdout.write('🔍 فحص نسب الشركاء...')
        partner_issues = self._check_unit_partners()
        errors.extend(partner_issues['errors'])
        warnings.extend(partner_issues['warnings'])

        # فحص الخزائن
        self.stdout.write('🔍 فحص الخزائن...')
        safe_issues = self._check_safes()
        errors.extend(safe_issues['errors'])
        warnings.extend(safe_issues['warnings'])

        # عرض النتائج
        self.stdout.write('\n' + '=' * 50 + '\n')

        if errors:
            self.stdout.write(self.style.ERROR(f'❌ تم العثور على {len(errors)} خطأ:'))
            for error in errors:
                self.stdout.write(self.style.ERROR(f'   - {error}'))
        else:
            self.stdout.write(self.style.SUCCESS('✅ لا توجد أخطاء في البيانات'))

        if warnings:
            self.stdout.write(self.style.WARNING(f'\n⚠️  تم العثور على {len(warnings)} تحذير:'))
            for warning in warnings:
                self.stdout.write(self.style.WARNING(f'   - {warning}'))

        self.stdout.write('\n' + '=' * 50)
        self.stdout.write(self.style.SUCCESS('✅ تم الانتهاء من فحص البيانات'))

    def _check_installments(self):
        """فحص صحة بيانات الأقساط"""
        errors = []
        warnings = []

        for installment in Installment.objects.select_related('unit'):
            label = f'القسط {installment.id} ({installment.unit.code})'

            if installment.amount < 0:
                errors.append(f'{label}: المتبقي سالب ({installment.amount})')
            if installment.amount > installment.original_amount:
                errors.append(
                    f'{label}: المتبقي ({installment.amount}) '
                    f'أكبر من قيمة القسط ({installment.original_amount})'
                )

            # فحص الحالة
            if installment.amount <= PAID_EPSILON and installment.status != Installment.STATUS_PAID:
                warnings.append(f'{label}: مدفوع بالكامل لكن الحالة {installment.get_status_display()}')
            elif installment.amount > PAID_EPSILON and installment.status == Installment.STATUS_PAID:
                warnings.append(f'{label}: الحالة مدفوع لكن المتبقي {installment.amount}')
            elif (installment.paid_amount > 0 and installment.amount > PAID_EPSILON
                    and installment.status != Installment.STATUS_PARTIAL):
                warnings.append(f'{label}: مدفوع جزئياً لكن الحالة {installment.get_status_display()}')

        return {'errors': errors, 'warnings': warnings}

    def _check_unit_partners(self):
        """فحص مجموع نسب الشركاء في كل وحدة"""
        errors = []
        warnings = []

        units = Unit.objects.annotate(total_percent=Sum('partner_links__percent'))
        for unit in units:
            total = unit.total_percent or Decimal('0')
            if total > 100:
                errors.append(f'الوحدة {unit.code}: مجموع نسب الشركاء {total}% يتجاوز 100%')
            elif unit.status == Unit.STATUS_SOLD and total != 100:
                errors.append(f'الوحدة {unit.code}: مباعة ومجموع نسب الشركاء {total}% وليس 100%')
            elif total == 0:
                warnings.append(f'الوحدة {unit.code}: لا يوجد شركاء مرتبطون بها')

        return {'errors': errors, 'warnings': warnings}

    def _check_safes(self):
        """فحص صحة أرصدة الخزائن"""
        errors = []
        warnings = []

        for safe in Safe.objects.all():
            calculated = safe.get_ledger_balance()
            if calculated != safe.balance:
                errors.append(
                    f'الخزنة {safe.name}: '
                    f'الرصيد المسجل ({safe.balance}) '
                    f'لا يساوي المحسوب ({calculated})'
                )
            if safe.balance < 0:
                warnings.append(f'الخزنة {safe.name}: الرصيد سالب ({safe.balance})')

        return {'errors': errors, 'warnings': warnings}
