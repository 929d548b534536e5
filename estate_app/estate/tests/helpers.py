from decimal import Decimal

from ..models import Customer, Partner, Safe, Unit, UnitPartner


def create_safe(name='الخزنة الرئيسية', balance='0'):
    balance = Decimal(balance)
    return Safe.objects.create(name=name, opening_balance=balance, balance=balance)


def create_customer(name='عميل تجريبي'):
    return Customer.objects.create(name=name, phone='01000000000')


def create_unit(name='شقة 1', floor='1', building='A', price='100000'):
    return Unit.objects.create(
        code=f'{building}-{floor}-{name}'.replace(' ', ''),
        name=name,
        floor=floor,
        building=building,
        total_price=Decimal(price),
    )


def link_partners(unit, *percents):
    """ربط شركاء جدد بالوحدة بالنسب المعطاة"""
    partners = []
    for index, percent in enumerate(percents, start=1):
        partner = Partner.objects.create(name=f'شريك {unit.pk}-{index}')
        UnitPartner.objects.create(unit=unit, partner=partner, percent=Decimal(percent))
        partners.append(partner)
    return partners
