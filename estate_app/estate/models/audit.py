from django.db import models
from django.core.serializers.json import DjangoJSONEncoder


class AuditLog(models.Model):
    """سجل العمليات"""
    timestamp = models.DateTimeField(
        auto_now_add=True,
        verbose_name="التوقيت"
    )
    description = models.CharField(
        max_length=255,
        verbose_name="الوصف"
    )
    details = models.JSONField(
        default=dict,
        blank=True,
        encoder=DjangoJSONEncoder,
        verbose_name="التفاصيل"
    )

    class Meta:
        verbose_name = "سجل عملية"
        verbose_name_plural = "سجل العمليات"
        ordering = ['-timestamp', '-id']

    def __str__(self):
        return f"{self.timestamp:%Y-%m-%d %H:%M} - {self.description}"
