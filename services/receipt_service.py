from sqlalchemy.orm import Session
from typing import Any, Dict

from config import SALON_NAME
from services.appointment_service import appointment_service

REMOVED_SERVICE_NAME = "Serviço removido"


class ReceiptService:
    def get_receipt(self, db: Session, appointment_id: int) -> Dict[str, Any]:
        """Comprovante público: itens com o preço congelado na reserva"""
        appointment = appointment_service.get_appointment(db, appointment_id)
        payment = appointment.payment

        items = [
            {
                "name": item.service.name if item.service else REMOVED_SERVICE_NAME,
                "price": item.price,
            }
            for item in appointment.appointment_services
        ]

        return {
            "salon_name": SALON_NAME,
            "appointment_id": appointment.id,
            "client_name": appointment.client.name if appointment.client else None,
            "attendant_name": appointment.attendant.name if appointment.attendant else None,
            "date": appointment.date,
            "start_time": appointment.start_time,
            "status": appointment.status,
            "items": items,
            "total": payment.amount if payment else appointment.total_price,
            "payment_method": payment.method if payment else None,
            "receipt_number": payment.receipt_number if payment else None,
            "paid_at": payment.created_at if payment else None,
        }

receipt_service = ReceiptService()
