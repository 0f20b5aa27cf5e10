"""
Receiving accounts for manual payments, read from settings.PAYMENT_RECEIVERS.
"""
from typing import Dict

from django.conf import settings

from apps.core.exceptions import ValidationException
from .models import MFS_METHODS, PaymentMethod


def _receivers() -> Dict:
    return getattr(settings, 'PAYMENT_RECEIVERS', {})


def receiver_reference_for(method: str) -> str:
    """The number or account a customer pays into for ``method``."""
    receivers = _receivers()
    if method in MFS_METHODS:
        return (receivers.get(method) or {}).get('number', '') or ''
    if method in (PaymentMethod.BANK_TRANSFER, PaymentMethod.CARD):
        bank = receivers.get('bank') or {}
        if bank.get('account_number'):
            return f"{bank.get('name', '')} {bank['account_number']}".strip()
    return ''


def payment_instructions(method: str) -> Dict:
    """
    What the customer needs to complete a manual payment.
    Cash on delivery has nothing to pay up front.
    """
    receivers = _receivers()
    if method in MFS_METHODS:
        account = receivers.get(method) or {}
        return {
            'type': 'mfs',
            'payment_number': account.get('number', ''),
            'account_type': account.get('type', ''),
        }
    if method in (PaymentMethod.BANK_TRANSFER, PaymentMethod.CARD):
        bank = receivers.get('bank') or {}
        return {
            'type': 'bank',
            'bank_name': bank.get('name', ''),
            'branch_name': bank.get('branch', ''),
            'account_name': bank.get('account_name', ''),
            'account_number': bank.get('account_number', ''),
        }
    raise ValidationException('Payment details are not applicable for this order type.', field='method')


def supported_methods() -> Dict:
    """Checkout configuration: currency, enabled methods and where to pay."""
    receivers = _receivers()
    enabled = getattr(settings, 'PAYMENT_METHODS', None) or list(PaymentMethod.values)
    methods = {}
    for method in enabled:
        if method == PaymentMethod.CASH_ON_DELIVERY:
            methods[method] = {'type': 'cod'}
        else:
            methods[method] = payment_instructions(method)
        methods[method]['label'] = PaymentMethod(method).label
    return {
        'currency': getattr(settings, 'CURRENCY', 'BDT'),
        'supported': list(enabled),
        'methods': methods,
        'configured': bool(receivers),
    }
