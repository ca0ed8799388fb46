"""Sensitive value validators package"""
from .base import SensitiveDataValidator
from .phone import PhoneValidator
from .email import EmailValidator
from .password import PasswordValidator
from .api_key import ApiKeyValidator
from .credit_card import CreditCardValidator

__all__ = [
    'SensitiveDataValidator',
    'PhoneValidator',
    'EmailValidator',
    'PasswordValidator',
    'ApiKeyValidator',
    'CreditCardValidator'
]
