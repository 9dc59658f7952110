from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional, List, Literal
from datetime import datetime, date as DateType, time as TimeType

AppointmentStatus = Literal["scheduled", "in_progress", "completed", "canceled"]
PaymentMethod = Literal["pix", "credit", "debit", "cash", "other"]
UserRole = Literal["admin", "employee"]

# Intervalos de retorno oferecidos no agendamento
RETURN_DAYS_OPTIONS = (7, 15, 20, 25, 30)

HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"
TIME_OF_DAY_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

# Schemas de Cliente
class ClientBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    cpf_cnpj: Optional[str] = None
    birth_date: Optional[DateType] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    active: bool = True

class ClientCreate(ClientBase):
    pass

class ClientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    cpf_cnpj: Optional[str] = None
    birth_date: Optional[DateType] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    active: Optional[bool] = None

class ClientResponse(ClientBase):
    id: int
    email: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

# Schemas de Usuário (equipe do salão)
class UserBase(BaseModel):
    email: EmailStr
    full_name: str
    phone: Optional[str] = None
    role: UserRole = "employee"

class UserCreate(UserBase):
    password: str = Field(..., min_length=6)

class UserResponse(UserBase):
    id: int
    email: str
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True

class UserLogin(BaseModel):
    email: str
    password: str

class UserToken(BaseModel):
    access_token: str
    token_type: str
    user: UserResponse

# Schemas de Serviço
class ServiceBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    duration_minutes: int = Field(30, ge=5)
    category: Optional[str] = None
    active: bool = True

class ServiceCreate(ServiceBase):
    pass

class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    duration_minutes: Optional[int] = Field(None, ge=5)
    category: Optional[str] = None
    active: Optional[bool] = None

class ServiceResponse(ServiceBase):
    id: int
    created_at: datetime

    class Config:
        from_attributes = True

# Schemas de Atendente
def _normalize_work_days(value):
    if value is None:
        return value
    if any(day < 0 or day > 6 for day in value):
        raise ValueError("Dias de trabalho devem estar entre 0 (domingo) e 6 (sábado)")
    return sorted(set(value))

class WorkHours(BaseModel):
    start: str = Field("09:00", pattern=TIME_OF_DAY_PATTERN)
    end: str = Field("18:00", pattern=TIME_OF_DAY_PATTERN)

    @model_validator(mode="after")
    def check_interval(self):
        # HH:MM com zero à esquerda permite comparar como texto
        if self.start >= self.end:
            raise ValueError("Horário inicial deve ser anterior ao final")
        return self

class AttendantBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    specialty: Optional[str] = None
    phone: Optional[str] = None
    commission_rate: float = Field(0, ge=0, le=100)
    color: str = Field("#6366f1", pattern=HEX_COLOR_PATTERN)
    active: bool = True
    work_days: List[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5, 6])
    work_hours: WorkHours = Field(default_factory=WorkHours)

    @field_validator("work_days")
    @classmethod
    def check_work_days(cls, value):
        return _normalize_work_days(value)

class AttendantCreate(AttendantBase):
    pass

class AttendantUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    specialty: Optional[str] = None
    phone: Optional[str] = None
    commission_rate: Optional[float] = Field(None, ge=0, le=100)
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    active: Optional[bool] = None
    work_days: Optional[List[int]] = None
    work_hours: Optional[WorkHours] = None

    @field_validator("work_days")
    @classmethod
    def check_work_days(cls, value):
        return _normalize_work_days(value)

class AttendantResponse(BaseModel):
    id: int
    name: str
    specialty: Optional[str] = None
    phone: Optional[str] = None
    commission_rate: float
    color: str
    active: bool
    work_days: Optional[List[int]] = None
    work_hours: Optional[WorkHours] = None
    created_at: datetime

    class Config:
        from_attributes = True

# Schemas de Agendamento
class AppointmentBase(BaseModel):
    client_id: int
    attendant_id: int
    date: DateType
    start_time: TimeType
    notes: Optional[str] = None

class AppointmentCreate(AppointmentBase):
    service_ids: List[int] = Field(..., min_length=1)
    total_price: Optional[float] = Field(None, ge=0)
    return_days: Optional[int] = None

    @field_validator("return_days")
    @classmethod
    def check_return_days(cls, value):
        if value is not None and value not in RETURN_DAYS_OPTIONS:
            raise ValueError(f"Retorno deve ser um destes intervalos: {RETURN_DAYS_OPTIONS}")
        return value

    @field_validator("notes")
    @classmethod
    def strip_notes(cls, value):
        return (value or "").strip() or None

class AppointmentUpdate(AppointmentCreate):
    pass

class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus

class AppointmentServiceResponse(BaseModel):
    id: int
    service_id: Optional[int] = None
    price: float
    service: Optional[ServiceResponse] = None

    class Config:
        from_attributes = True

class PaymentResponse(BaseModel):
    id: int
    appointment_id: int
    amount: float
    method: PaymentMethod
    commission_amount: float
    receipt_number: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class AppointmentResponse(AppointmentBase):
    id: int
    end_time: Optional[TimeType] = None
    status: AppointmentStatus
    total_price: float
    return_date: Optional[DateType] = None
    created_at: datetime
    updated_at: datetime
    client: Optional[ClientResponse] = None
    attendant: Optional[AttendantResponse] = None
    appointment_services: List[AppointmentServiceResponse] = []
    payment: Optional[PaymentResponse] = None

    class Config:
        from_attributes = True

# Schemas de Conclusão / Pagamento
class CompleteAppointmentRequest(BaseModel):
    method: PaymentMethod = "pix"

class CompleteAppointmentResponse(BaseModel):
    appointment: AppointmentResponse
    payment: PaymentResponse
    receipt_url: str
    whatsapp_link: Optional[str] = None

    class Config:
        from_attributes = True

# Schemas do comprovante público
class ReceiptItem(BaseModel):
    name: str
    price: float

class ReceiptResponse(BaseModel):
    salon_name: str
    appointment_id: int
    client_name: Optional[str] = None
    attendant_name: Optional[str] = None
    date: DateType
    start_time: TimeType
    status: AppointmentStatus
    items: List[ReceiptItem]
    total: float
    payment_method: Optional[PaymentMethod] = None
    receipt_number: Optional[str] = None
    paid_at: Optional[datetime] = None

# Schemas de Relatórios
class RevenuePoint(BaseModel):
    name: str
    total: float

class DashboardSummary(BaseModel):
    today_appointments: int
    total_clients: int
    monthly_revenue: float
    total_services: int
    revenue_chart: List[RevenuePoint]
