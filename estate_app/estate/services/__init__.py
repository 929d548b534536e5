from .audit import AuditService
from .treasury import TreasuryService
from .contracts import ContractService
from .installments import InstallmentService
from .units import UnitService
from .partners import PartnerService
from .brokers import BrokerService
from .deletion import DeletionService
from .reports import ReportService
from .legacy import LegacyStateImporter

__all__ = [
    'AuditService',
    'TreasuryService',
    'ContractService',
    'InstallmentService',
    'UnitService',
    'PartnerService',
    'BrokerService',
    'DeletionService',
    'ReportService',
    'LegacyStateImporter',
]
