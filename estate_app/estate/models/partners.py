from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from django.core.exceptions import ValidationError
from decimal import Decimal


class Partner(models.Model):
    """نموذج الشركاء"""
    name = models.CharField(
        max_length=200,
        verbose_name="اسم الشريك"
    )
    phone = models.CharField(
        max_length=20,
        blank=True,
        default='',
        verbose_name="رقم الهاتف"
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
        verbose_name = "شريك"
        verbose_name_plural = "الشركاء"
        ordering = ['name']

    def __str__(self):
        return self.name

    def get_ledger(self):
        """كشف حساب الشريك"""
        from ..services.partners import PartnerService
        return PartnerService.partner_ledger(self)


class PartnerGroup(models.Model):
    """نموذج مجموعات الشركاء"""
    name = models.CharField(
        max_length=200,
        unique=True,
        verbose_name="اسم المجموعة"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="تاريخ الإنشاء"
    )

    class Meta:
        verbose_name = "مجموعة شركاء"
        verbose_name_plural = "مجموعات الشركاء"
        ordering = ['name']

    def __str__(self):
        return self.name

    def get_total_percent(self):
        return self.members.aggregate(
            total=models.Sum('percent')
        )['total'] or Decimal('0')

    def validate_total_percent(self):
        """التحقق من أن مجموع النسب = 100%"""
        total = self.get_total_percent()
        if total != Decimal('100'):
            raise ValidationError(
                f"لا يمكن استخدام هذه المجموعة. إجمالي النسب فيها هو {total}% ويجب أن يكون 100%."
            )


class PartnerGroupMember(models.Model):
    """نموذج أعضاء مجموعة الشركاء"""
    group = models.ForeignKey(
        PartnerGroup,
        on_delete=models.CASCADE,
        related_name='members',
        verbose_name="المجموعة"
    )
    partner = models.ForeignKey(
        Partner,
        on_delete=models.PROTECT,
        related_name='group_memberships',
        verbose_name="الشريك"
    )
    percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01')), MaxValueValidator(Decimal('100'))],
        verbose_name="النسبة في المجموعة %"
    )

    class Meta:
        verbose_name = "عضو مجموعة"
        verbose_name_plural = "أعضاء المجموعة"
        unique_together = [['group', 'partner']]
        ordering = ['group', '-percent']

    def __str__(self):
        return f"{self.partner.name} - {self.percent}%"


class UnitPartner(models.Model):
    """ربط الشريك بالوحدة ونسبة ملكيته فيها"""
    unit = models.ForeignKey(
        'estate.Unit',
        on_delete=models.CASCADE,
        related_name='partner_links',
        verbose_name="الوحدة"
    )
    partner = models.ForeignKey(
        Partner,
        on_delete=models.PROTECT,
        related_name='unit_links',
        verbose_name="الشريك"
    )
    percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01')), MaxValueValidator(Decimal('100'))],
        verbose_name="النسبة %"
    )

    class Meta:
        verbose_name = "شريك وحدة"
        verbose_name_plural = "شركاء الوحدات"
        unique_together = [['unit', 'partner']]
        ordering = ['unit', '-percent']

    def __str__(self):
        return f"{self.unit.code} - {self.partner.name} ({self.percent}%)"


class PartnerDebt(models.Model):
    """دين بين شريكين نتج عن إرجاع وحدة وشرائها من أحد الشركاء"""

    STATUS_UNPAID = 'unpaid'
    STATUS_PAID = 'paid'
    STATUS_CHOICES = [
        (STATUS_UNPAID, 'غير مدفوع'),
        (STATUS_PAID, 'مدفوع'),
    ]

    unit = models.ForeignKey(
        'estate.Unit',
        on_delete=models.CASCADE,
        related_name='partner_debts',
        verbose_name="الوحدة"
    )
    paying_partner = models.ForeignKey(
        Partner,
        on_delete=models.PROTECT,
        related_name='debts_to_pay',
        verbose_name="الشريك الدافع"
    )
    owed_partner = models.ForeignKey(
        Partner,
        on_delete=models.PROTECT,
        related_name='debts_owed',
        verbose_name="الشريك المستحق"
    )
    amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        verbose_name="المبلغ"
    )
    due_date = models.DateField(
        verbose_name="تاريخ الاستحقاق"
    )
    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=STATUS_UNPAID,
        verbose_name="الحالة"
    )
    payment_date = models.DateField(
        null=True,
        blank=True,
        verbose_name="تاريخ السداد"
    )

    class Meta:
        verbose_name = "دين شريك"
        verbose_name_plural = "ديون الشركاء"
        ordering = ['due_date', 'id']
        indexes = [
            models.Index(fields=['status'], name='estate_pdebt_status_idx'),
        ]

    def __str__(self):
        return f"{self.paying_partner.name} → {self.owed_partner.name}: {self.amount}"
