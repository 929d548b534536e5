from django.db import models
from decimal import Decimal
from datetime import date


class Installment(models.Model):
    """نموذج الأقساط

    amount هو المتبقي من القسط و original_amount هو قيمته عند التوليد،
    والفرق بينهما هو ما تم سداده.
    """

    KIND_REGULAR = 'regular'
    KIND_ANNUAL = 'annual'
    KIND_MAINTENANCE = 'maintenance'
    KIND_CHOICES = [
        (KIND_REGULAR, 'قسط'),
        (KIND_ANNUAL, 'دفعة سنوية'),
        (KIND_MAINTENANCE, 'دفعة صيانة'),
    ]

    STATUS_UNPAID = 'unpaid'
    STATUS_PARTIAL = 'partial'
    STATUS_PAID = 'paid'
    STATUS_CHOICES = [
        (STATUS_UNPAID, 'غير مدفوع'),
        (STATUS_PARTIAL, 'مدفوع جزئياً'),
        (STATUS_PAID, 'مدفوع'),
    ]

    unit = models.ForeignKey(
        'estate.Unit',
        on_delete=models.CASCADE,
        related_name='installments',
        verbose_name="الوحدة"
    )
    contract = models.ForeignKey(
        'estate.Contract',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='installments',
        verbose_name="العقد"
    )
    kind = models.CharField(
        max_length=20,
        choices=KIND_CHOICES,
        default=KIND_REGULAR,
        verbose_name="النوع"
    )
    amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        verbose_name="المتبقي"
    )
    original_amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        verbose_name="المبلغ الأصلي"
    )
    due_date = models.DateField(
        verbose_name="تاريخ الاستحقاق"
    )
    payment_date = models.DateField(
        null=True,
        blank=True,
        verbose_name="تاريخ السداد"
    )
    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=STATUS_UNPAID,
        verbose_name="الحالة"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="تاريخ الإنشاء"
    )

    class Meta:
        verbose_name = "قسط"
        verbose_name_plural = "الأقساط"
        ordering = ['due_date', 'id']
        indexes = [
            models.Index(fields=['unit', 'status'], name='estate_inst_unit_status_idx'),
            models.Index(fields=['due_date'], name='estate_inst_due_date_idx'),
        ]

    def __str__(self):
        return f"{self.get_kind_display()} {self.due_date} - {self.amount}"

    @property
    def paid_amount(self):
        """المبلغ المسدد حتى الآن"""
        return self.original_amount - self.amount

    @property
    def is_paid(self):
        return self.status == self.STATUS_PAID

    def is_overdue(self, today=None):
        today = today or date.today()
        return not self.is_paid and self.due_date < today

    @classmethod
    def open_for_unit(cls, unit):
        """الأقساط غير المسددة بالكامل للوحدة مرتبة بتاريخ الاستحقاق"""
        return cls.objects.filter(unit=unit).exclude(
            status=cls.STATUS_PAID
        ).order_by('due_date', 'id')

    @classmethod
    def total_open_amount(cls, unit):
        return cls.open_for_unit(unit).aggregate(
            total=models.Sum('amount')
        )['total'] or Decimal('0')
