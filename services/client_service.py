import logging
from sqlalchemy.orm import Session
from sqlalchemy import or_
from fastapi import HTTPException, status
from typing import List, Optional

from models import Client, Appointment
from schemas import ClientCreate, ClientUpdate
from utils.query_cache import query_cache

logger = logging.getLogger(__name__)


def _only_digits(value: str) -> str:
    return ''.join(ch for ch in (value or '') if ch.isdigit())


def _normalize_email(value: Optional[str]) -> Optional[str]:
    return (value or '').strip().lower() or None


def _is_valid_cpf(cpf: str) -> bool:
    digits = _only_digits(cpf)
    if len(digits) != 11:
        return False
    if digits == digits[0] * 11:
        return False
    def calc(base: str) -> int:
        total = sum(int(base[i]) * (len(base) + 1 - i) for i in range(len(base)))
        mod = total % 11
        return 0 if mod < 2 else 11 - mod
    d1 = calc(digits[:9])
    d2 = calc(digits[:9] + str(d1))
    return digits.endswith(f"{d1}{d2}")


def _clean_tax_id(value: Optional[str]) -> Optional[str]:
    """CPF (11 dígitos, com verificação) ou CNPJ (14 dígitos)"""
    digits = _only_digits(value)
    if not digits:
        return None
    if len(digits) == 11 and _is_valid_cpf(digits):
        return digits
    if len(digits) == 14:
        return digits
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="CPF/CNPJ inválido")


def _clean_phone(value: Optional[str]) -> Optional[str]:
    phone = (value or '').strip()
    if not phone:
        return None
    if len(_only_digits(phone)) < 10:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Telefone inválido")
    return phone


class ClientService:
    def create_client(self, db: Session, client: ClientCreate) -> Client:
        payload = client.model_dump()
        payload["name"] = payload["name"].strip()
        payload["email"] = _normalize_email(payload["email"])
        payload["phone"] = _clean_phone(payload["phone"])
        payload["cpf_cnpj"] = _clean_tax_id(payload["cpf_cnpj"])

        db_client = Client(**payload)
        db.add(db_client)
        db.commit()
        db.refresh(db_client)
        query_cache.invalidate("clients")

        logger.info(f"Cliente {db_client.id} ({db_client.name}) cadastrado")
        return db_client

    def get_client(self, db: Session, client_id: int) -> Client:
        client = db.query(Client).filter(Client.id == client_id).first()
        if not client:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Cliente não encontrado"
            )
        return client

    def get_clients(self, db: Session, status_filter: str = "all", search: Optional[str] = None) -> List[Client]:
        """Buscar clientes com filtro de status (all, active, inactive) e busca por nome/telefone/email"""
        query = db.query(Client)

        if status_filter == "active":
            query = query.filter(Client.active == True)
        elif status_filter == "inactive":
            query = query.filter(Client.active == False)
        # Se "all", não aplica filtro

        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Client.name.ilike(pattern),
                    Client.phone.ilike(pattern),
                    Client.email.ilike(pattern)
                )
            )

        return query.order_by(Client.name).all()

    def update_client(self, db: Session, client_id: int, client_update: ClientUpdate) -> Client:
        db_client = self.get_client(db, client_id)
        update_data = client_update.model_dump(exclude_unset=True)

        if "name" in update_data:
            if not update_data["name"]:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nome é obrigatório")
            update_data["name"] = update_data["name"].strip()
        if "email" in update_data:
            update_data["email"] = _normalize_email(update_data["email"])
        if "phone" in update_data:
            update_data["phone"] = _clean_phone(update_data["phone"])
        if "cpf_cnpj" in update_data:
            update_data["cpf_cnpj"] = _clean_tax_id(update_data["cpf_cnpj"])
        if update_data.get("active") is None:
            update_data.pop("active", None)

        for field, value in update_data.items():
            setattr(db_client, field, value)

        db.commit()
        db.refresh(db_client)
        query_cache.invalidate("clients")

        return db_client

    def set_active(self, db: Session, client_id: int, active: bool) -> Client:
        """Ativar/inativar cliente sem excluir o histórico"""
        db_client = self.get_client(db, client_id)
        if db_client.active == active:
            detail = "Cliente já está ativo" if active else "Cliente já está inativo"
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

        db_client.active = active
        db.commit()
        db.refresh(db_client)
        query_cache.invalidate("clients")

        logger.info(f"Cliente {client_id} {'reativado' if active else 'inativado'}")
        return db_client

    def delete_client(self, db: Session, client_id: int):
        """Excluir cliente definitivamente do banco"""
        db_client = self.get_client(db, client_id)

        if db.query(Appointment.id).filter(Appointment.client_id == client_id).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cliente possui agendamentos; inative-o em vez de excluir"
            )

        db.delete(db_client)
        db.commit()
        query_cache.invalidate("clients")

        logger.info(f"Cliente {client_id} excluído")

client_service = ClientService()
