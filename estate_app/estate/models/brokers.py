from django.db import models
from decimal import Decimal


class Broker(models.Model):
    """نموذج السماسرة"""
    name = models.CharField(
        max_length=200,
        unique=True,
        verbose_name="اسم السمسار"
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
        verbose_name = "سمسار"
        verbose_name_plural = "السماسرة"
        ordering = ['name']

    def __str__(self):
        return self.name

    def get_total_due(self):
        return self.dues.filter(status=BrokerDue.STATUS_DUE).aggregate(
            total=models.Sum('amount')
        )['total'] or Decimal('0')


class BrokerDue(models.Model):
    """عمولة مستحقة للسمسار على عقد"""

    STATUS_DUE = 'due'
    STATUS_PAID = 'paid'
    STATUS_CHOICES = [
        (STATUS_DUE, 'مستحقة'),
        (STATUS_PAID, 'مدفوعة'),
    ]

    contract = models.ForeignKey(
        'estate.Contract',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='broker_dues',
        verbose_name="العقد"
    )
    broker = models.ForeignKey(
        Broker,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='dues',
        verbose_name="السمسار"
    )
    broker_name = models.CharField(
        max_length=200,
        verbose_name="اسم السمسار"
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
        default=STATUS_DUE,
        verbose_name="الحالة"
    )
    payment_date = models.DateField(
        null=True,
        blank=True,
        verbose_name="تاريخ الدفع"
    )
    paid_from_safe = models.ForeignKey(
        'estate.Safe',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='paid_broker_dues',
        verbose_name="دفعت من خزنة"
    )

    class Meta:
        verbose_name = "عمولة سمسار"
        verbose_name_plural = "عمولات السماسرة"
        ordering = ['due_date', 'id']

    def __str__(self):
        return f"{self.broker_name} - {self.amount}"
