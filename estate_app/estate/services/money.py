import re
from decimal import Decimal, InvalidOperation, ROUND_FLOOR, ROUND_HALF_UP

from django.core.exceptions import ValidationError

CENT = Decimal('0.01')
ZERO = Decimal('0')

# أي مبلغ متبقٍ أقل من أو يساوي هذه القيمة يعتبر مسدداً
PAID_EPSILON = Decimal('0.005')

ARABIC_DIGITS = str.maketrans('0123456789', '٠١٢٣٤٥٦٧٨٩')


def to_decimal(value):
    """تحويل أي قيمة رقمية إلى Decimal"""
    if value is None or value == '':
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"قيمة رقمية غير صحيحة: {value}")


def parse_amount(text):
    """قراءة مبلغ من نص مع حذف أي رموز غير الأرقام والعلامة العشرية"""
    cleaned = re.sub(r'[^\d.]', '', str(text or ''))
    match = re.match(r'\d*(?:\.\d+)?', cleaned)
    return to_decimal(match.group(0))


def round_money(value):
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def floor_money(value):
    return to_decimal(value).quantize(CENT, rounding=ROUND_FLOOR)


def split_evenly(total, parts):
    """تقسيم مبلغ على عدد من الدفعات المتساوية

    كل الدفعات عدا الأخيرة = floor(total / parts) لأقرب قرش،
    والأخيرة تأخذ الفرق حتى يساوي المجموع total بالضبط.
    """
    total = to_decimal(total)
    if parts <= 0:
        return []

    sign = -1 if total < 0 else 1
    base = floor_money(abs(total) / parts) * sign
    amounts = [base] * (parts - 1)
    amounts.append((total - sum(amounts, ZERO)).quantize(CENT))
    return amounts


def format_egp(value):
    """تنسيق المبلغ بالجنيه المصري بالأرقام العربية"""
    amount = round_money(value)
    text = f'{amount:,.2f}'.replace(',', '٬').replace('.', '٫')
    return f"{text.translate(ARABIC_DIGITS)} ج.م"
