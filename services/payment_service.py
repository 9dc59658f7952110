import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from fastapi import HTTPException, status
from typing import Any, Dict, Optional

from models import Payment
from services.appointment_service import appointment_service
from services.whatsapp_service import whatsapp_service
from utils.date_utils import get_local_date
from utils.query_cache import query_cache

logger = logging.getLogger(__name__)

COMPLETABLE_STATUSES = ("scheduled", "in_progress")


def calculate_commission(amount: float, commission_rate: Optional[float]) -> float:
    """Comissão = valor x percentual do atendente / 100 (0 sem atendente ou percentual)"""
    if not amount or not commission_rate:
        return 0.0
    return round(amount * commission_rate / 100, 2)


class PaymentService:
    def complete_appointment(self, db: Session, appointment_id: int, method: str) -> Dict[str, Any]:
        """
        Conclui o atendimento e registra o pagamento na mesma transação.
        O link de WhatsApp é apenas oferecido; falhar ao montá-lo não desfaz a conclusão.
        """
        appointment = appointment_service.get_appointment(db, appointment_id)

        if appointment.status not in COMPLETABLE_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Agendamento com status {appointment.status} não pode ser concluído"
            )
        if appointment.payment is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Pagamento já registrado para este agendamento"
            )

        commission_rate = appointment.attendant.commission_rate if appointment.attendant else None
        commission_amount = calculate_commission(appointment.total_price, commission_rate)

        try:
            appointment.status = "completed"
            payment = Payment(
                appointment_id=appointment.id,
                amount=appointment.total_price,
                method=method,
                commission_amount=commission_amount,
            )
            db.add(payment)
            db.flush()
            payment.receipt_number = f"{get_local_date():%Y%m%d}-{payment.id:06d}"
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Erro ao finalizar agendamento {appointment_id}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Erro ao salvar o pagamento"
            )

        query_cache.invalidate("appointments")
        query_cache.invalidate("payments")
        logger.info(
            f"Agendamento {appointment_id} concluído: R$ {payment.amount:.2f} via {method}, "
            f"comissão R$ {payment.commission_amount:.2f}"
        )

        appointment = appointment_service.get_appointment(db, appointment_id)
        try:
            whatsapp_link = whatsapp_service.build_receipt_link(appointment)
        except ValueError as e:
            logger.warning(f"Comprovante do agendamento {appointment_id} sem link de WhatsApp: {e}")
            whatsapp_link = None

        return {
            "appointment": appointment,
            "payment": appointment.payment,
            "receipt_url": whatsapp_service.receipt_url(appointment_id),
            "whatsapp_link": whatsapp_link,
        }

    def get_payment_by_appointment(self, db: Session, appointment_id: int) -> Payment:
        payment = db.query(Payment).filter(Payment.appointment_id == appointment_id).first()
        if not payment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Pagamento não encontrado"
            )
        return payment

payment_service = PaymentService()
