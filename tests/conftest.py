import os

# O engine da aplicação não pode apontar para o Postgres de produção nos testes
os.environ.setdefault("DATABASE_URL", "sqlite://")

from types import SimpleNamespace

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from database import get_db
from main import app
from models import Base, User
from security import create_access_token, get_password_hash
from utils.query_cache import query_cache

STAFF_PASSWORD = "secret123"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    query_cache.use_client(fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True))
    yield TestClient(app)
    app.dependency_overrides.clear()
    query_cache.use_client(None)


def _create_user(db_session, email, role):
    user = User(
        email=email,
        full_name=email.split("@")[0].title(),
        password_hash=get_password_hash(STAFF_PASSWORD),
        role=role,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session):
    return _create_user(db_session, "admin@salonflow.com", "admin")


@pytest.fixture
def employee_user(db_session):
    return _create_user(db_session, "recepcao@salonflow.com", "employee")


@pytest.fixture
def auth_client(client, admin_user):
    return TestClient(app, headers={"Authorization": f"Bearer {create_access_token(admin_user.email)}"})


@pytest.fixture
def employee_client(client, employee_user):
    return TestClient(app, headers={"Authorization": f"Bearer {create_access_token(employee_user.email)}"})


@pytest.fixture
def salon(auth_client):
    """Cliente, atendente com 20% de comissão e dois serviços (R$ 10 e R$ 20)"""
    customer = auth_client.post("/clients/", json={"name": "Maria Souza", "phone": "(81) 99999-8888"})
    attendant = auth_client.post("/attendants/", json={"name": "Ana Lima", "commission_rate": 20})
    corte = auth_client.post("/services/", json={"name": "Corte", "price": 10, "duration_minutes": 30})
    escova = auth_client.post("/services/", json={"name": "Escova", "price": 20, "duration_minutes": 45})
    for response in (customer, attendant, corte, escova):
        assert response.status_code == 201, response.text

    return SimpleNamespace(
        client=customer.json(),
        attendant=attendant.json(),
        corte=corte.json(),
        escova=escova.json(),
    )


@pytest.fixture
def book(auth_client, salon):
    """Cria um agendamento com valores padrão sobrescrevíveis"""
    def _book(**overrides):
        payload = {
            "client_id": salon.client["id"],
            "attendant_id": salon.attendant["id"],
            "date": "2024-01-01",
            "start_time": "09:00:00",
            "service_ids": [salon.corte["id"], salon.escova["id"]],
        }
        payload.update(overrides)
        return auth_client.post("/appointments/", json=payload)
    return _book


@pytest.fixture
def failing_flush(monkeypatch):
    """Faz o flush falhar depois de N flushes bem-sucedidos; devolve monkeypatch.undo"""
    original_flush = Session.flush

    def _install(successful_flushes):
        calls = []

        def flush(self, objects=None):
            calls.append(1)
            if len(calls) > successful_flushes:
                raise SQLAlchemyError("falha simulada no banco")
            return original_flush(self, objects)

        monkeypatch.setattr(Session, "flush", flush)
        return monkeypatch.undo
    return _install
