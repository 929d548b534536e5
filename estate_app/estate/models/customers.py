from django.db import models
from django.core.validators import RegexValidator


class Customer(models.Model):
    """نموذج العملاء"""

    STATUS_CHOICES = [
        ('active', 'نشط'),
        ('inactive', 'غير نشط'),
    ]

    name = models.CharField(
        max_length=200,
        verbose_name="اسم العميل"
    )
    phone = models.CharField(
        max_length=20,
        blank=True,
        default='',
        validators=[
            RegexValidator(
                regex=r'^[0-9+\-\s]*$',
                message='رقم الهاتف يجب أن يحتوي على أرقام فقط'
            )
        ],
        verbose_name="رقم الهاتف"
    )
    national_id = models.CharField(
        max_length=20,
        blank=True,
        default='',
        verbose_name="الرقم القومي"
    )
    address = models.TextField(
        blank=True,
        default='',
        verbose_name="العنوان"
    )
    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default='active',
        verbose_name="الحالة"
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
        verbose_name = "عميل"
        verbose_name_plural = "العملاء"
        ordering = ['name']

    def __str__(self):
        return self.name

    def get_total_contracts_value(self):
        """إجمالي قيمة العقود للعميل"""
        return self.contracts.aggregate(
            total=models.Sum('total_price')
        )['total'] or 0
