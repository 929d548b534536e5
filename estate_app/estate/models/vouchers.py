from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
from datetime import date


class Voucher(models.Model):
    """نموذج السندات (قبض / صرف)"""

    TYPE_RECEIPT = 'receipt'
    TYPE_PAYMENT = 'payment'
    TYPE_CHOICES = [
        (TYPE_RECEIPT, 'قبض'),
        (TYPE_PAYMENT, 'صرف'),
    ]

    NUMBER_PREFIXES = {
        TYPE_RECEIPT: 'RV',
        TYPE_PAYMENT: 'PV',
    }

    voucher_number = models.CharField(
        max_length=20,
        unique=True,
        verbose_name="رقم السند"
    )
    type = models.CharField(
        max_length=10,
        choices=TYPE_CHOICES,
        verbose_name="نوع السند"
    )
    date = models.DateField(
        default=date.today,
        verbose_name="التاريخ"
    )
    amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        verbose_name="المبلغ"
    )
    safe = models.ForeignKey(
        'estate.Safe',
        on_delete=models.PROTECT,
        related_name='vouchers',
        verbose_name="الخزنة"
    )
    description = models.TextField(
        verbose_name="البيان"
    )
    party = models.CharField(
        max_length=200,
        blank=True,
        default='',
        verbose_name="الدافع/المستفيد"
    )

    # المرجع المرتبط بالسند
    unit = models.ForeignKey(
        'estate.Unit',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='vouchers',
        verbose_name="الوحدة"
    )
    contract = models.ForeignKey(
        'estate.Contract',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='vouchers',
        verbose_name="العقد"
    )
    installment = models.ForeignKey(
        'estate.Installment',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='vouchers',
        verbose_name="القسط"
    )
    broker_due = models.ForeignKey(
        'estate.BrokerDue',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='vouchers',
        verbose_name="عمولة السمسار"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="تاريخ الإنشاء"
    )

    class Meta:
        verbose_name = "سند"
        verbose_name_plural = "السندات"
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['date'], name='estate_voucher_date_idx'),
            models.Index(fields=['type'], name='estate_voucher_type_idx'),
        ]

    def __str__(self):
        return f"سند {self.get_type_display()} {self.voucher_number}"

    @property
    def is_receipt(self):
        return self.type == self.TYPE_RECEIPT

    def save(self, *args, **kwargs):
        # توليد رقم السند تلقائياً إذا لم يكن موجوداً
        if not self.voucher_number:
            self.voucher_number = self.generate_voucher_number()
        super().save(*args, **kwargs)

    def generate_voucher_number(self):
        """توليد رقم السند التلقائي"""
        prefix = self.NUMBER_PREFIXES[self.type]
        last_voucher = Voucher.objects.filter(
            voucher_number__startswith=f'{prefix}-'
        ).order_by('-id').first()
        if last_voucher:
            try:
                last_number = int(last_voucher.voucher_number.split('-')[1])
                return f"{prefix}-{last_number + 1:06d}"
            except (IndexError, ValueError):
                pass
        return f"{prefix}-000001"
