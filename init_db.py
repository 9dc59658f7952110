#!/usr/bin/env python3
"""
Script para inicializar o banco de dados com dados de exemplo
Execute este script após a primeira execução do sistema
"""
import logging

from database import SessionLocal, engine
from models import Base, User, Service, Attendant
from security import get_password_hash

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_EMAIL = "admin@salonflow.com"
DEFAULT_ADMIN_PASSWORD = "admin123"

SAMPLE_SERVICES = [
    {
        "name": "Corte Feminino",
        "description": "Corte com lavagem e finalização",
        "price": 80.00,
        "duration_minutes": 60,
        "category": "Cabelo"
    },
    {
        "name": "Escova",
        "description": "Escova modeladora",
        "price": 50.00,
        "duration_minutes": 45,
        "category": "Cabelo"
    },
    {
        "name": "Manicure",
        "description": "Cutilagem e esmaltação",
        "price": 35.00,
        "duration_minutes": 40,
        "category": "Unhas"
    },
    {
        "name": "Pedicure",
        "description": "Cutilagem e esmaltação dos pés",
        "price": 40.00,
        "duration_minutes": 50,
        "category": "Unhas"
    },
    {
        "name": "Design de Sobrancelha",
        "description": "Design com pinça e linha",
        "price": 30.00,
        "duration_minutes": 30,
        "category": "Estética"
    }
]

def init_database(db=None) -> bool:
    """
    Inicializar banco de dados com dados de exemplo.
    Retorna False quando já existe um usuário cadastrado.
    """
    owns_session = db is None
    if owns_session:
        # Criar tabelas
        Base.metadata.create_all(bind=engine)
        db = SessionLocal()

    try:
        # Verificar se já existe um usuário
        if db.query(User).first():
            logger.info("Usuário já existe no banco de dados")
            return False

        db.add(User(
            email=DEFAULT_ADMIN_EMAIL,
            full_name="Administrador",
            password_hash=get_password_hash(DEFAULT_ADMIN_PASSWORD),
            role="admin",
            is_active=True
        ))

        for service_data in SAMPLE_SERVICES:
            db.add(Service(**service_data))

        db.add(Attendant(
            name="Atendente Padrão",
            commission_rate=30,
            work_days=[1, 2, 3, 4, 5, 6],
            work_hours={"start": "09:00", "end": "18:00"}
        ))

        db.commit()
        logger.info(f"Administrador criado: {DEFAULT_ADMIN_EMAIL} / {DEFAULT_ADMIN_PASSWORD} (altere a senha após o primeiro login)")
        logger.info(f"{len(SAMPLE_SERVICES)} serviços de exemplo criados")
        return True

    except Exception:
        db.rollback()
        logger.exception("Erro ao inicializar banco de dados")
        raise
    finally:
        if owns_session:
            db.close()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    logger.info("Inicializando banco de dados do SalonFlow...")
    init_database()
