import logging
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from typing import List
from sqlalchemy import func

from models import Service, AppointmentLineItem
from schemas import ServiceCreate, ServiceUpdate
from utils.query_cache import query_cache

logger = logging.getLogger(__name__)

class ServiceService:
    def _check_unique_name(self, db: Session, name: str, service_id: int = None):
        query = db.query(Service).filter(func.lower(Service.name) == name.lower())
        if service_id is not None:
            query = query.filter(Service.id != service_id)
        if query.first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Serviço com este nome já existe"
            )

    def create_service(self, db: Session, service: ServiceCreate) -> Service:
        payload = service.model_dump()
        payload["name"] = payload["name"].strip()
        self._check_unique_name(db, payload["name"])

        db_service = Service(**payload)
        db.add(db_service)
        db.commit()
        db.refresh(db_service)
        query_cache.invalidate("services")

        logger.info(f"Serviço {db_service.id} ({db_service.name}) criado a R$ {db_service.price:.2f}")
        return db_service

    def get_service(self, db: Session, service_id: int) -> Service:
        service = db.query(Service).filter(Service.id == service_id).first()
        if not service:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Serviço não encontrado"
            )
        return service

    def get_services(self, db: Session, active_only: bool = False) -> List[Service]:
        query = db.query(Service)
        if active_only:
            query = query.filter(Service.active == True)
        return query.order_by(Service.name).all()

    def update_service(self, db: Session, service_id: int, service_update: ServiceUpdate) -> Service:
        db_service = self.get_service(db, service_id)
        update_data = service_update.model_dump(exclude_unset=True)

        # Campos obrigatórios não podem ser limpos
        for field in ("name", "price", "duration_minutes", "active"):
            if field in update_data and update_data[field] is None:
                update_data.pop(field)

        # Verificar se nome já existe (se foi alterado)
        if "name" in update_data:
            update_data["name"] = update_data["name"].strip()
            if update_data["name"] != db_service.name:
                self._check_unique_name(db, update_data["name"], service_id)

        for field, value in update_data.items():
            setattr(db_service, field, value)

        db.commit()
        db.refresh(db_service)
        query_cache.invalidate("services")

        return db_service

    def delete_service(self, db: Session, service_id: int):
        db_service = self.get_service(db, service_id)

        # Serviços já usados em agendamentos ficam no histórico dos comprovantes
        in_use = db.query(AppointmentLineItem.id).filter(AppointmentLineItem.service_id == service_id).first()
        if in_use:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Serviço vinculado a agendamentos; inative-o em vez de excluir"
            )

        db.delete(db_service)
        db.commit()
        query_cache.invalidate("services")

        logger.info(f"Serviço {service_id} excluído")

service_service = ServiceService()
