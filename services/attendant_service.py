import logging
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from typing import List

from models import Attendant, Appointment
from schemas import AttendantCreate, AttendantUpdate
from utils.query_cache import query_cache

logger = logging.getLogger(__name__)

class AttendantService:
    def create_attendant(self, db: Session, attendant: AttendantCreate) -> Attendant:
        payload = attendant.model_dump()
        payload["name"] = payload["name"].strip()

        db_attendant = Attendant(**payload)
        db.add(db_attendant)
        db.commit()
        db.refresh(db_attendant)
        query_cache.invalidate("attendants")

        logger.info(f"Atendente {db_attendant.id} ({db_attendant.name}) cadastrado")
        return db_attendant

    def get_attendant(self, db: Session, attendant_id: int) -> Attendant:
        attendant = db.query(Attendant).filter(Attendant.id == attendant_id).first()
        if not attendant:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Atendente não encontrado"
            )
        return attendant

    def get_attendants(self, db: Session, active_only: bool = False) -> List[Attendant]:
        query = db.query(Attendant)
        if active_only:
            query = query.filter(Attendant.active == True)
        return query.order_by(Attendant.name).all()

    def update_attendant(self, db: Session, attendant_id: int, attendant_update: AttendantUpdate) -> Attendant:
        db_attendant = self.get_attendant(db, attendant_id)
        update_data = attendant_update.model_dump(exclude_unset=True)

        for field in ("name", "commission_rate", "color", "active"):
            if field in update_data and update_data[field] is None:
                update_data.pop(field)
        if "name" in update_data:
            update_data["name"] = update_data["name"].strip()

        for field, value in update_data.items():
            setattr(db_attendant, field, value)

        db.commit()
        db.refresh(db_attendant)
        query_cache.invalidate("attendants")

        return db_attendant

    def delete_attendant(self, db: Session, attendant_id: int):
        db_attendant = self.get_attendant(db, attendant_id)

        if db.query(Appointment.id).filter(Appointment.attendant_id == attendant_id).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Atendente possui agendamentos; inative-o em vez de excluir"
            )

        db.delete(db_attendant)
        db.commit()
        query_cache.invalidate("attendants")

        logger.info(f"Atendente {attendant_id} excluído")

attendant_service = AttendantService()
