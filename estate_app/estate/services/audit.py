import logging

from ..models import AuditLog

logger = logging.getLogger('estate.audit')


class AuditService:
    """خدمة سجل العمليات"""

    @staticmethod
    def log_action(description, **details):
        """تسجيل عملية في سجل العمليات"""
        entry = AuditLog.objects.create(
            description=description,
            details=details
        )
        logger.info('%s %s', description, details)
        return entry

    @staticmethod
    def search(query=None, from_date=None, to_date=None):
        entries = AuditLog.objects.all()
        if query:
            entries = entries.filter(description__icontains=query)
        if from_date:
            entries = entries.filter(timestamp__date__gte=from_date)
        if to_date:
            entries = entries.filter(timestamp__date__lte=to_date)
        return entries
