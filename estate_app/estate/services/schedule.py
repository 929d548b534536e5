from dateutil.relativedelta import relativedelta
from django.core.exceptions import ValidationError

from .money import ZERO, to_decimal, split_evenly


def plan_installments(total_price, start_date, months=1, count=0,
                      discount=ZERO, down_payment=ZERO, maintenance_deposit=ZERO,
                      extra_annual=0, annual_value=ZERO):
    """حساب جدول الأقساط بدون حفظه

    يرجع قائمة من القواميس بالمفاتيح kind و amount و due_date بترتيب:
    الأقساط العادية ثم الدفعات السنوية ثم دفعة الصيانة.
    """
    total_price = to_decimal(total_price)
    discount = to_decimal(discount)
    down_payment = to_decimal(down_payment)
    maintenance_deposit = to_decimal(maintenance_deposit)
    annual_value = to_decimal(annual_value)

    installment_base = total_price - maintenance_deposit
    amount_to_schedule = installment_base - discount - down_payment
    total_annual = extra_annual * annual_value

    if amount_to_schedule < 0:
        raise ValidationError('خطأ: المقدم والخصم أكبر من قيمة العقد الخاضعة للتقسيط.')
    if total_annual > amount_to_schedule:
        raise ValidationError('خطأ: مجموع الدفعات السنوية أكبر من المبلغ المتبقي للتقسيط.')

    amount_for_regular = amount_to_schedule - total_annual
    lines = []

    for i, amount in enumerate(split_evenly(amount_for_regular, count)):
        lines.append({
            'kind': 'regular',
            'amount': amount,
            'due_date': start_date + relativedelta(months=months * (i + 1)),
        })

    for j in range(extra_annual):
        lines.append({
            'kind': 'annual',
            'amount': annual_value,
            'due_date': start_date + relativedelta(months=12 * (j + 1)),
        })

    if maintenance_deposit > 0:
        if lines:
            last_due = max(line['due_date'] for line in lines)
            due_date = last_due + relativedelta(months=months)
        else:
            due_date = start_date
        lines.append({
            'kind': 'maintenance',
            'amount': maintenance_deposit,
            'due_date': due_date,
        })

    return lines
