import logging
from sqlalchemy.orm import Session, joinedload, selectinload
from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from fastapi import HTTPException, status
from datetime import date
from typing import List, Optional, Tuple

from models import Appointment, AppointmentLineItem, Attendant, Client, Payment, Service
from schemas import AppointmentCreate, AppointmentUpdate
from utils.date_utils import add_days, add_minutes
from utils.query_cache import query_cache

logger = logging.getLogger(__name__)

RETURN_NOTE_TEMPLATE = "Retorno automático de {days} dias"

# Transições aceitas pela rota de status; a conclusão passa pelo pagamento
STATUS_TRANSITIONS = {
    "scheduled": {"in_progress", "canceled"},
    "in_progress": {"canceled"},
    "completed": set(),
    "canceled": set(),
}


def compute_return_date(base: date, return_days: Optional[int]) -> Optional[date]:
    if not return_days:
        return None
    return add_days(base, return_days)


class AppointmentService:
    def _base_query(self, db: Session):
        return db.query(Appointment).options(
            joinedload(Appointment.client),
            joinedload(Appointment.attendant),
            selectinload(Appointment.appointment_services).joinedload(AppointmentLineItem.service),
            joinedload(Appointment.payment),
        )

    def _ensure_participants(self, db: Session, client_id: int, attendant_id: int) -> Client:
        client = db.query(Client).filter(Client.id == client_id).first()
        if not client:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Cliente não encontrado"
            )
        if not db.query(Attendant.id).filter(Attendant.id == attendant_id).first():
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Atendente não encontrado"
            )
        return client

    def _snapshot_services(self, db: Session, appointment: Appointment, service_ids: List[int]) -> Tuple[float, int]:
        """
        Grava um item por serviço selecionado com o preço atual do catálogo,
        inclusive quando o mesmo serviço é escolhido mais de uma vez.
        Serviço que não existe mais entra com preço 0.
        Retorna (soma dos preços, soma das durações em minutos).
        """
        catalog = {
            service.id: service
            for service in db.query(Service).filter(Service.id.in_(set(service_ids))).all()
        }

        total_price = 0.0
        total_minutes = 0
        for service_id in service_ids:
            service = catalog.get(service_id)
            if service is None:
                logger.warning(f"Serviço {service_id} não encontrado; item do agendamento {appointment.id} gravado com preço 0")
                db.add(AppointmentLineItem(appointment_id=appointment.id, service_id=None, price=0.0))
                continue

            db.add(AppointmentLineItem(appointment_id=appointment.id, service_id=service.id, price=service.price))
            total_price += service.price
            total_minutes += service.duration_minutes or 0

        return total_price, total_minutes

    def create_appointment(self, db: Session, data: AppointmentCreate) -> Appointment:
        client = self._ensure_participants(db, data.client_id, data.attendant_id)
        return_date = compute_return_date(data.date, data.return_days)

        try:
            # Agendar um cliente inativo o reativa
            if not client.active:
                client.active = True

            appointment = Appointment(
                client_id=data.client_id,
                attendant_id=data.attendant_id,
                date=data.date,
                start_time=data.start_time,
                notes=data.notes,
                status="scheduled",
                return_date=return_date,
            )
            db.add(appointment)
            db.flush()

            snapshot_total, total_minutes = self._snapshot_services(db, appointment, data.service_ids)
            appointment.total_price = data.total_price if data.total_price is not None else snapshot_total
            appointment.end_time = add_minutes(data.start_time, total_minutes) if total_minutes else None

            if return_date:
                # Retorno não recebe itens; carrega apenas o valor original como referência
                db.add(Appointment(
                    client_id=data.client_id,
                    attendant_id=data.attendant_id,
                    date=return_date,
                    start_time=data.start_time,
                    end_time=appointment.end_time,
                    total_price=appointment.total_price,
                    notes=RETURN_NOTE_TEMPLATE.format(days=data.return_days),
                    status="scheduled",
                ))

            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Erro ao criar agendamento")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Erro ao criar agendamento"
            )

        query_cache.invalidate("appointments")
        query_cache.invalidate("clients")
        logger.info(
            f"Agendamento {appointment.id} criado para {appointment.date} {appointment.start_time}"
            + (f" com retorno em {return_date}" if return_date else "")
        )
        return self.get_appointment(db, appointment.id)

    def update_appointment(self, db: Session, appointment_id: int, data: AppointmentUpdate) -> Appointment:
        db_appointment = self.get_appointment(db, appointment_id)
        self._ensure_participants(db, data.client_id, data.attendant_id)

        try:
            db_appointment.client_id = data.client_id
            db_appointment.attendant_id = data.attendant_id
            db_appointment.date = data.date
            db_appointment.start_time = data.start_time
            db_appointment.notes = data.notes
            db_appointment.return_date = compute_return_date(data.date, data.return_days)

            # Substitui todos os itens pela seleção atual
            db.query(AppointmentLineItem).filter(
                AppointmentLineItem.appointment_id == appointment_id
            ).delete(synchronize_session=False)
            db.flush()

            snapshot_total, total_minutes = self._snapshot_services(db, db_appointment, data.service_ids)
            db_appointment.total_price = data.total_price if data.total_price is not None else snapshot_total
            db_appointment.end_time = add_minutes(data.start_time, total_minutes) if total_minutes else None

            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Erro ao atualizar agendamento {appointment_id}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Erro ao atualizar agendamento"
            )

        query_cache.invalidate("appointments")
        logger.info(f"Agendamento {appointment_id} atualizado")
        return self.get_appointment(db, appointment_id)

    def update_status(self, db: Session, appointment_id: int, new_status: str) -> Appointment:
        db_appointment = self.get_appointment(db, appointment_id)
        current = db_appointment.status

        if new_status == "completed":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Para concluir o atendimento registre o pagamento"
            )
        if new_status not in STATUS_TRANSITIONS.get(current, set()):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Transição de status inválida: {current} -> {new_status}"
            )

        db_appointment.status = new_status
        db.commit()
        query_cache.invalidate("appointments")

        logger.info(f"Agendamento {appointment_id}: {current} -> {new_status}")
        return self.get_appointment(db, appointment_id)

    def delete_appointment(self, db: Session, appointment_id: int):
        self.get_appointment(db, appointment_id)

        try:
            # Itens e pagamento saem antes do agendamento
            db.query(AppointmentLineItem).filter(
                AppointmentLineItem.appointment_id == appointment_id
            ).delete(synchronize_session=False)
            db.query(Payment).filter(Payment.appointment_id == appointment_id).delete(synchronize_session=False)
            db.query(Appointment).filter(Appointment.id == appointment_id).delete(synchronize_session=False)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Erro ao excluir agendamento {appointment_id}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Erro ao excluir agendamento"
            )

        query_cache.invalidate("appointments")
        logger.info(f"Agendamento {appointment_id} excluído")

    def get_appointment(self, db: Session, appointment_id: int) -> Appointment:
        appointment = self._base_query(db).filter(Appointment.id == appointment_id).first()
        if not appointment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Agendamento não encontrado"
            )
        return appointment

    def get_appointments(self, db: Session, day: Optional[date] = None) -> List[Appointment]:
        """Agendamentos de um dia (ou todos), em ordem de data e horário"""
        query = self._base_query(db)
        if day is not None:
            query = query.filter(Appointment.date == day)
        return query.order_by(Appointment.date, Appointment.start_time).all()

    def get_appointments_by_range(
        self,
        db: Session,
        start_date: date,
        end_date: date,
        attendant_id: Optional[int] = None
    ) -> List[Appointment]:
        """Buscar agendamentos por período (datas inclusivas)"""
        if start_date > end_date:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Data inicial deve ser anterior ou igual à final"
            )

        query = self._base_query(db).filter(
            and_(
                Appointment.date >= start_date,
                Appointment.date <= end_date
            )
        )
        if attendant_id is not None:
            query = query.filter(Appointment.attendant_id == attendant_id)

        return query.order_by(Appointment.date, Appointment.start_time).all()

    def get_client_appointments(self, db: Session, client_id: int) -> List[Appointment]:
        """Buscar agendamentos de um cliente específico"""
        return self._base_query(db).filter(
            Appointment.client_id == client_id
        ).order_by(Appointment.date.desc(), Appointment.start_time.desc()).all()

    def get_history(self, db: Session, search: Optional[str] = None) -> List[Appointment]:
        """Atendimentos concluídos, do mais recente para o mais antigo"""
        query = self._base_query(db).filter(Appointment.status == "completed")

        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Appointment.client.has(Client.name.ilike(pattern)),
                    Appointment.attendant.has(Attendant.name.ilike(pattern))
                )
            )

        return query.order_by(Appointment.date.desc(), Appointment.start_time.desc()).all()

appointment_service = AppointmentService()
