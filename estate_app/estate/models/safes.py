from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
from datetime import date


class Safe(models.Model):
    """نموذج الخزائن"""
    name = models.CharField(
        max_length=200,
        unique=True,
        verbose_name="اسم الخزنة"
    )
    opening_balance = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name="الرصيد الافتتاحي"
    )
    balance = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name="الرصيد الحالي"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="تاريخ الإنشاء"
    )

    class Meta:
        verbose_name = "خزنة"
        verbose_name_plural = "الخزائن"
        ordering = ['name']

    def __str__(self):
        return self.name

    def get_ledger_balance(self):
        """الرصيد المحسوب من الحركات"""
        from ..services.treasury import TreasuryService
        return TreasuryService.get_ledger_balance(self)


class Transfer(models.Model):
    """نموذج التحويلات بين الخزائن"""
    from_safe = models.ForeignKey(
        Safe,
        on_delete=models.PROTECT,
        related_name='transfers_out',
        verbose_name="من خزنة"
    )
    to_safe = models.ForeignKey(
        Safe,
        on_delete=models.PROTECT,
        related_name='transfers_in',
        verbose_name="إلى خزنة"
    )
    amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        verbose_name="المبلغ"
    )
    date = models.DateField(
        default=date.today,
        verbose_name="التاريخ"
    )
    notes = models.TextField(
        blank=True,
        default='',
        verbose_name="ملاحظات"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="تاريخ الإنشاء"
    )

    class Meta:
        verbose_name = "تحويل"
        verbose_name_plural = "التحويلات"
        ordering = ['-date', '-created_at']

    def __str__(self):
        return f"{self.from_safe.name} → {self.to_safe.name}: {self.amount}"
