import re

from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal


def build_unit_code(building, floor, name):
    """كود الوحدة = البرج-الدور-الاسم بدون مسافات"""
    parts = [re.sub(r'\s', '', str(part or '')) for part in (building, floor, name)]
    return '-'.join(parts)


class Unit(models.Model):
    """نموذج الوحدات السكنية"""

    STATUS_AVAILABLE = 'available'
    STATUS_RESERVED = 'reserved'
    STATUS_SOLD = 'sold'
    STATUS_RETURNED = 'returned'
    STATUS_CHOICES = [
        (STATUS_AVAILABLE, 'متاحة'),
        (STATUS_RESERVED, 'محجوزة'),
        (STATUS_SOLD, 'مباعة'),
        (STATUS_RETURNED, 'مرتجعة'),
    ]

    code = models.CharField(
        max_length=175,
        unique=True,
        verbose_name="كود الوحدة"
    )
    name = models.CharField(
        max_length=100,
        verbose_name="اسم الوحدة"
    )
    floor = models.CharField(
        max_length=20,
        verbose_name="رقم الدور"
    )
    building = models.CharField(
        max_length=50,
        verbose_name="البرج/العمارة"
    )
    area = models.CharField(
        max_length=20,
        blank=True,
        default='',
        verbose_name="المساحة (م²)"
    )
    unit_type = models.CharField(
        max_length=50,
        default='سكني',
        verbose_name="نوع الوحدة"
    )
    total_price = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        verbose_name="السعر الكلي"
    )
    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=STATUS_AVAILABLE,
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
        verbose_name = "وحدة"
        verbose_name_plural = "الوحدات"
        ordering = ['name']
        indexes = [
            models.Index(fields=['status'], name='estate_unit_status_idx'),
        ]

    def __str__(self):
        return self.code

    @property
    def display_name(self):
        parts = []
        if self.name:
            parts.append(f"اسم الوحدة ({self.name})")
        if self.floor:
            parts.append(f"رقم الدور ({self.floor})")
        if self.building:
            parts.append(f"رقم العمارة ({self.building})")
        return ' '.join(parts)

    def get_partners_total_percent(self):
        return self.partner_links.aggregate(
            total=models.Sum('percent')
        )['total'] or Decimal('0')

    def get_active_contract(self):
        from .contracts import Contract
        return Contract.objects.filter(unit=self).first()

    def calc_remaining(self):
        """المبلغ المتبقي على الوحدة"""
        from ..services.units import UnitService
        return UnitService.calc_remaining(self)

    def mark_as_sold(self):
        """تحديد الوحدة كمباعة"""
        self.status = self.STATUS_SOLD
        self.save(update_fields=['status'])

    def mark_as_available(self):
        self.status = self.STATUS_AVAILABLE
        self.save(update_fields=['status'])
