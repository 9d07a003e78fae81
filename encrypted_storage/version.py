"""Encrypted Storage Meta information.
   Encrypted Storage keeps per-caller encrypted records behind a subscription.
"""
__title__ = 'encrypted_storage'
__description__ = (
   'Encrypted Storage keeps per-caller encrypted records '
   'behind a trial or paid subscription.'
)
__version__ = '0.3.0'
__license__ = 'Apache-2.0'
