import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import List, Optional

from fastapi import FastAPI, Depends, Query
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from config import (
    LOG_LEVEL, CORS_ORIGINS, SALON_NAME,
    ANDROID_PACKAGE_NAME, ANDROID_CERT_FINGERPRINTS
)
from database import get_db, engine
from models import Base, User
from schemas import (
    ClientCreate, ClientUpdate, ClientResponse,
    UserCreate, UserLogin, UserResponse, UserToken,
    ServiceCreate, ServiceUpdate, ServiceResponse,
    AttendantCreate, AttendantUpdate, AttendantResponse,
    AppointmentCreate, AppointmentUpdate, AppointmentResponse,
    AppointmentStatusUpdate, CompleteAppointmentRequest,
    CompleteAppointmentResponse, PaymentResponse,
    ReceiptResponse, DashboardSummary
)
from services import (
    client_service, user_service, service_service, attendant_service,
    appointment_service, payment_service, receipt_service, report_service
)
from auth import get_current_user, get_current_admin
from utils.query_cache import query_cache

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Criar tabelas
    Base.metadata.create_all(bind=engine)
    logger.info(f"{SALON_NAME} API iniciada")
    yield


app = FastAPI(
    title="SalonFlow API",
    description="API de gestão de salão: agenda, clientes, serviços, atendentes e pagamentos",
    version="1.0.0",
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _dump(schema, rows):
    return [schema.model_validate(row).model_dump(mode="json") for row in rows]


# Health check
@app.get("/health")
async def health_check():
    """Verificar status da API"""
    return {"status": "healthy", "message": f"{SALON_NAME} API funcionando"}

# Digital Asset Links do app Android
@app.get("/.well-known/assetlinks.json")
async def asset_links():
    """Declaração de delegação de URLs para o app Android (TWA)"""
    return [{
        "relation": ["delegate_permission/common.handle_all_urls"],
        "target": {
            "namespace": "android_app",
            "package_name": ANDROID_PACKAGE_NAME,
            "sha256_cert_fingerprints": ANDROID_CERT_FINGERPRINTS
        }
    }]

# Comprovante público (sem autenticação)
@app.get("/public/receipts/{appointment_id}", response_model=ReceiptResponse)
def get_public_receipt(appointment_id: int, db: Session = Depends(get_db)):
    """Comprovante de serviço de um agendamento"""
    return receipt_service.get_receipt(db, appointment_id)

# Rotas de Autenticação
@app.post("/auth/login", response_model=UserToken)
def login(login_data: UserLogin, db: Session = Depends(get_db)):
    """Login da equipe via email e senha"""
    return user_service.login_user(db, login_data)

@app.get("/auth/me", response_model=UserResponse)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Obter informações do usuário logado"""
    return current_user

# Rotas de Usuários (apenas admin)
@app.post("/users/", response_model=UserResponse)
def create_user(
    user: UserCreate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Cadastrar novo usuário da equipe"""
    return user_service.create_user(db, user)

@app.get("/users/", response_model=List[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Listar usuários da equipe"""
    return user_service.get_users(db)

@app.delete("/users/{user_id}")
def deactivate_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Desativar usuário da equipe"""
    user_service.deactivate_user(db, user_id)
    return {"message": "Usuário desativado com sucesso"}

# Rotas de Cliente
@app.get("/clients/", response_model=List[ClientResponse])
def list_clients(
    status: str = Query("all", pattern="^(all|active|inactive)$", description="Filtro de status: all, active, inactive"),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Listar clientes em ordem alfabética"""
    return query_cache.get_or_load(
        "clients",
        (status, search),
        lambda: _dump(ClientResponse, client_service.get_clients(db, status, search))
    )

@app.get("/clients/{client_id}", response_model=ClientResponse)
def get_client(
    client_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Obter cliente por ID"""
    return client_service.get_client(db, client_id)

@app.get("/clients/{client_id}/appointments", response_model=List[AppointmentResponse])
def get_client_appointments(
    client_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Obter agendamentos de um cliente específico"""
    client_service.get_client(db, client_id)
    return appointment_service.get_client_appointments(db, client_id)

@app.post("/clients/", response_model=ClientResponse, status_code=201)
def create_client(
    client: ClientCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Cadastrar novo cliente"""
    return client_service.create_client(db, client)

@app.put("/clients/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: int,
    client_update: ClientUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Atualizar cliente"""
    return client_service.update_client(db, client_id, client_update)

@app.post("/clients/{client_id}/deactivate", response_model=ClientResponse)
def deactivate_client(
    client_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Inativar cliente mantendo o histórico"""
    return client_service.set_active(db, client_id, False)

@app.post("/clients/{client_id}/reactivate", response_model=ClientResponse)
def reactivate_client(
    client_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Reativar cliente inativo"""
    return client_service.set_active(db, client_id, True)

@app.delete("/clients/{client_id}")
def delete_client(
    client_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Excluir cliente"""
    client_service.delete_client(db, client_id)
    return {"message": "Cliente excluído com sucesso"}

# Rotas de Serviços
@app.get("/services/", response_model=List[ServiceResponse])
def list_services(
    active_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Listar serviços"""
    return query_cache.get_or_load(
        "services",
        (active_only,),
        lambda: _dump(ServiceResponse, service_service.get_services(db, active_only))
    )

@app.get("/services/{service_id}", response_model=ServiceResponse)
def get_service(
    service_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Obter serviço por ID"""
    return service_service.get_service(db, service_id)

@app.post("/services/", response_model=ServiceResponse, status_code=201)
def create_service(
    service: ServiceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Criar novo serviço"""
    return service_service.create_service(db, service)

@app.put("/services/{service_id}", response_model=ServiceResponse)
def update_service(
    service_id: int,
    service_update: ServiceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Atualizar serviço"""
    return service_service.update_service(db, service_id, service_update)

@app.delete("/services/{service_id}")
def delete_service(
    service_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Excluir serviço"""
    service_service.delete_service(db, service_id)
    return {"message": "Serviço excluído com sucesso"}

# Rotas de Atendentes
@app.get("/attendants/", response_model=List[AttendantResponse])
def list_attendants(
    active_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Listar atendentes"""
    return query_cache.get_or_load(
        "attendants",
        (active_only,),
        lambda: _dump(AttendantResponse, attendant_service.get_attendants(db, active_only))
    )

@app.get("/attendants/{attendant_id}", response_model=AttendantResponse)
def get_attendant(
    attendant_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Obter atendente por ID"""
    return attendant_service.get_attendant(db, attendant_id)

@app.post("/attendants/", response_model=AttendantResponse, status_code=201)
def create_attendant(
    attendant: AttendantCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Cadastrar novo atendente"""
    return attendant_service.create_attendant(db, attendant)

@app.put("/attendants/{attendant_id}", response_model=AttendantResponse)
def update_attendant(
    attendant_id: int,
    attendant_update: AttendantUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Atualizar atendente"""
    return attendant_service.update_attendant(db, attendant_id, attendant_update)

@app.delete("/attendants/{attendant_id}")
def delete_attendant(
    attendant_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Excluir atendente"""
    attendant_service.delete_attendant(db, attendant_id)
    return {"message": "Atendente excluído com sucesso"}

# Rotas de Agendamento
@app.get("/appointments/", response_model=List[AppointmentResponse])
def list_appointments(
    day: Optional[date] = Query(None, alias="date", description="Filtrar por dia (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Listar agendamentos ordenados por data e horário"""
    return query_cache.get_or_load(
        "appointments",
        ("day", day),
        lambda: _dump(AppointmentResponse, appointment_service.get_appointments(db, day))
    )

@app.get("/appointments/range", response_model=List[AppointmentResponse])
def list_appointments_by_range(
    start_date: date,
    end_date: date,
    attendant_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Listar agendamentos de um período (dia, semana ou mês da agenda)"""
    return query_cache.get_or_load(
        "appointments",
        ("range", start_date, end_date, attendant_id),
        lambda: _dump(
            AppointmentResponse,
            appointment_service.get_appointments_by_range(db, start_date, end_date, attendant_id)
        )
    )

@app.get("/appointments/history", response_model=List[AppointmentResponse])
def get_appointments_history(
    search: Optional[str] = Query(None, description="Nome do cliente ou do atendente"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Histórico de atendimentos concluídos"""
    return appointment_service.get_history(db, search)

@app.get("/appointments/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Obter agendamento por ID"""
    return appointment_service.get_appointment(db, appointment_id)

@app.post("/appointments/", response_model=AppointmentResponse, status_code=201)
def create_appointment(
    appointment: AppointmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Criar agendamento (e o retorno automático, se configurado)"""
    return appointment_service.create_appointment(db, appointment)

@app.put("/appointments/{appointment_id}", response_model=AppointmentResponse)
def update_appointment(
    appointment_id: int,
    appointment_update: AppointmentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Atualizar agendamento e substituir os serviços selecionados"""
    return appointment_service.update_appointment(db, appointment_id, appointment_update)

@app.patch("/appointments/{appointment_id}/status", response_model=AppointmentResponse)
def update_appointment_status(
    appointment_id: int,
    status_update: AppointmentStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Iniciar ou cancelar atendimento"""
    return appointment_service.update_status(db, appointment_id, status_update.status)

@app.post("/appointments/{appointment_id}/complete", response_model=CompleteAppointmentResponse)
def complete_appointment(
    appointment_id: int,
    request: CompleteAppointmentRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Concluir atendimento registrando o pagamento e a comissão"""
    return payment_service.complete_appointment(db, appointment_id, request.method)

@app.get("/appointments/{appointment_id}/payment", response_model=PaymentResponse)
def get_appointment_payment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Obter pagamento de um agendamento"""
    return payment_service.get_payment_by_appointment(db, appointment_id)

@app.delete("/appointments/{appointment_id}")
def delete_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Excluir agendamento"""
    appointment_service.delete_appointment(db, appointment_id)
    return {"message": "Agendamento excluído com sucesso"}

# Rotas de Relatórios
@app.get("/reports/dashboard", response_model=DashboardSummary)
def get_dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Indicadores do painel: agenda do dia, clientes, faturamento do mês"""
    return report_service.get_dashboard_summary(db)
