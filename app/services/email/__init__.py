"""Email services package"""
from .base import DeliveryInfo, EmailDeliveryError, EmailTransport, OutgoingEmail
from .factory import EmailTransportFactory, get_email_transport

__all__ = [
    'DeliveryInfo',
    'EmailDeliveryError',
    'EmailTransport',
    'EmailTransportFactory',
    'OutgoingEmail',
    'get_email_transport',
]
