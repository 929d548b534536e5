from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from decimal import Decimal


class Contract(models.Model):
    """نموذج العقود"""

    PAYMENT_INSTALLMENT = 'installment'
    PAYMENT_CASH = 'cash'
    PAYMENT_TYPES = [
        (PAYMENT_INSTALLMENT, 'تقسيط'),
        (PAYMENT_CASH, 'كاش'),
    ]

    CADENCE_CHOICES = [
        ('monthly', 'شهري'),
        ('quarterly', 'ربع سنوي'),
        ('semiannual', 'نصف سنوي'),
        ('annual', 'سنوي'),
    ]

    # عدد الشهور في كل فترة سداد
    CADENCE_MONTHS = {
        'monthly': 1,
        'quarterly': 3,
        'semiannual': 6,
        'annual': 12,
    }

    code = models.CharField(
        max_length=20,
        unique=True,
        verbose_name="كود العقد"
    )
    unit = models.OneToOneField(
        'estate.Unit',
        on_delete=models.PROTECT,
        related_name='contract',
        verbose_name="الوحدة"
    )
    customer = models.ForeignKey(
        'estate.Customer',
        on_delete=models.PROTECT,
        related_name='contracts',
        verbose_name="العميل"
    )
    total_price = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        verbose_name="السعر الكلي"
    )
    discount_amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))],
        verbose_name="الخصم"
    )
    down_payment = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))],
        verbose_name="المقدم"
    )
    maintenance_deposit = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))],
        verbose_name="وديعة الصيانة"
    )
    payment_type = models.CharField(
        max_length=20,
        choices=PAYMENT_TYPES,
        default=PAYMENT_INSTALLMENT,
        verbose_name="طريقة السداد"
    )
    broker_name = models.CharField(
        max_length=200,
        blank=True,
        default='',
        verbose_name="اسم السمسار"
    )
    broker_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))],
        verbose_name="نسبة العمولة %"
    )
    broker_amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name="مبلغ العمولة"
    )
    commission_safe = models.ForeignKey(
        'estate.Safe',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='commission_contracts',
        verbose_name="خزنة العمولة"
    )
    cadence = models.CharField(
        max_length=20,
        choices=CADENCE_CHOICES,
        default='monthly',
        verbose_name="نظام الأقساط"
    )
    installments_count = models.PositiveIntegerField(
        default=0,
        verbose_name="عدد الدفعات"
    )
    extra_annual = models.PositiveSmallIntegerField(
        default=0,
        validators=[MaxValueValidator(3)],
        verbose_name="عدد الدفعات السنوية"
    )
    annual_payment_value = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))],
        verbose_name="قيمة الدفعة السنوية"
    )
    start_date = models.DateField(
        verbose_name="تاريخ البدء"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="تاريخ الإنشاء"
    )

    class Meta:
        verbose_name = "عقد"
        verbose_name_plural = "العقود"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['start_date'], name='estate_contract_start_idx'),
        ]

    def __str__(self):
        return f"{self.code} - {self.customer.name}"

    @property
    def cadence_months(self):
        return self.CADENCE_MONTHS.get(self.cadence, 1)

    def get_total_owed(self):
        """إجمالي المستحق بعد الخصم"""
        return self.total_price - self.discount_amount

    def get_summary(self):
        from ..services.contracts import ContractService
        return ContractService.get_contract_summary(self)
