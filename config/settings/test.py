"""
Settings for the pytest run
"""
from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
DEFAULT_FROM_EMAIL = 'NexCart Support <support@nexcart.test>'

NOTIFICATIONS = {
    'ADMIN_EMAIL': 'admin@nexcart.test',
    'ASYNC': False,
    'MAX_WORKERS': 1,
}

PAYMENT_RECEIVERS = {
    'bkash': {'number': '01700000001', 'type': 'Merchant'},
    'nagad': {'number': '01700000002', 'type': 'Personal'},
    'rocket': {'number': '01700000003', 'type': 'Personal'},
    'bank': {
        'name': 'Test Bank',
        'branch': 'Gulshan',
        'account_name': 'NexCart Ltd',
        'account_number': '1234567890',
    },
}

PRICING_POLICY = {'MODE': 'percent_markup', 'VALUE': '15', 'ROUNDING': 'to_10'}

REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # noqa: F405
    'DEFAULT_THROTTLE_CLASSES': [],
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {'null': {'class': 'logging.NullHandler'}},
    'root': {'handlers': ['null'], 'level': 'WARNING'},
}
