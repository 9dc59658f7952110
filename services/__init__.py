from .client_service import client_service
from .user_service import user_service
from .service_service import service_service
from .attendant_service import attendant_service
from .appointment_service import appointment_service
from .payment_service import payment_service
from .receipt_service import receipt_service
from .report_service import report_service
from .whatsapp_service import whatsapp_service

__all__ = [
    "client_service",
    "user_service",
    "service_service",
    "attendant_service",
    "appointment_service",
    "payment_service",
    "receipt_service",
    "report_service",
    "whatsapp_service"
]
