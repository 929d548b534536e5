from .partners import Partner, PartnerGroup, PartnerGroupMember, UnitPartner, PartnerDebt
from .safes import Safe, Transfer
from .customers import Customer
from .units import Unit, build_unit_code
from .brokers import Broker, BrokerDue
from .contracts import Contract
from .installments import Installment
from .vouchers import Voucher
from .audit import AuditLog

__all__ = [
    'Partner',
    'PartnerGroup',
    'PartnerGroupMember',
    'UnitPartner',
    'PartnerDebt',
    'Safe',
    'Transfer',
    'Customer',
    'Unit',
    'build_unit_code',
    'Broker',
    'BrokerDue',
    'Contract',
    'Installment',
    'Voucher',
    'AuditLog',
]
