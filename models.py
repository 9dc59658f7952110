from sqlalchemy import Column, Integer, String, DateTime, Date, Time, Float, Boolean, ForeignKey, Text, JSON, CheckConstraint
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime

Base = declarative_base()


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    phone = Column(String(20), nullable=True)
    email = Column(String(100), nullable=True)
    cpf_cnpj = Column(String(18), nullable=True)
    birth_date = Column(Date, nullable=True)
    address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relacionamentos
    appointments = relationship("Appointment", back_populates="client")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    full_name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default="employee", nullable=False)  # admin, employee
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class Service(Base):
    __tablename__ = "services"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_services_price"),
        CheckConstraint("duration_minutes >= 5", name="ck_services_duration"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False, default=0.0)
    duration_minutes = Column(Integer, default=30, nullable=False)
    category = Column(String(50), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Attendant(Base):
    __tablename__ = "attendants"
    __table_args__ = (
        CheckConstraint("commission_rate >= 0 AND commission_rate <= 100", name="ck_attendants_commission"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    specialty = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True)
    commission_rate = Column(Float, default=0.0, nullable=False)  # percentual 0-100
    color = Column(String(7), default="#6366f1", nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    work_days = Column(JSON, nullable=True)  # [0..6], 0 = domingo
    work_hours = Column(JSON, nullable=True)  # {"start": "09:00", "end": "18:00"}
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    appointments = relationship("Appointment", back_populates="attendant")


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    attendant_id = Column(Integer, ForeignKey("attendants.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=True)
    status = Column(String(20), default="scheduled", nullable=False)  # scheduled, in_progress, completed, canceled
    total_price = Column(Float, default=0.0, nullable=False)
    notes = Column(Text, nullable=True)
    return_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relacionamentos
    client = relationship("Client", back_populates="appointments")
    attendant = relationship("Attendant", back_populates="appointments")
    appointment_services = relationship(
        "AppointmentLineItem",
        back_populates="appointment",
        order_by="AppointmentLineItem.id",
    )
    payment = relationship("Payment", back_populates="appointment", uselist=False)


class AppointmentLineItem(Base):
    """Serviço vinculado a um agendamento, com o preço congelado na data da reserva"""
    __tablename__ = "appointment_services"

    id = Column(Integer, primary_key=True, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=False, index=True)
    # Nulo quando o serviço informado não existe mais no catálogo
    service_id = Column(Integer, ForeignKey("services.id"), nullable=True)
    price = Column(Float, default=0.0, nullable=False)

    appointment = relationship("Appointment", back_populates="appointment_services")
    service = relationship("Service")


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), unique=True, nullable=False)
    amount = Column(Float, default=0.0, nullable=False)
    method = Column(String(20), nullable=False)  # pix, credit, debit, cash, other
    commission_amount = Column(Float, default=0.0, nullable=False)
    receipt_number = Column(String(30), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    appointment = relationship("Appointment", back_populates="payment")
