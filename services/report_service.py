from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import datetime, timedelta
from typing import Any, Dict, List

from models import Appointment, Client, Payment, Service
from utils.date_utils import get_local_date, local_midnight_utc, month_start, to_local


# Domingo primeiro, como no calendário do salão
WEEKDAY_LABELS = ["Dom", "Seg", "Ter", "Qua", "Qui", "Sex", "Sáb"]


class ReportService:
    def get_dashboard_summary(self, db: Session) -> Dict[str, Any]:
        """Indicadores do painel inicial"""
        today = get_local_date()

        # Agendamentos de hoje
        today_appointments = db.query(func.count(Appointment.id)).filter(
            Appointment.date == today
        ).scalar()

        # Cadastros totais, ativos ou não
        total_clients = db.query(func.count(Client.id)).scalar()
        total_services = db.query(func.count(Service.id)).scalar()

        # Faturamento do mês: pagamentos desde a meia-noite local do dia 1
        monthly_revenue = db.query(func.sum(Payment.amount)).filter(
            Payment.created_at >= local_midnight_utc(month_start(today))
        ).scalar() or 0.0

        return {
            "today_appointments": today_appointments or 0,
            "total_clients": total_clients or 0,
            "monthly_revenue": float(monthly_revenue),
            "total_services": total_services or 0,
            "revenue_chart": self.get_weekly_revenue(db),
        }

    def get_weekly_revenue(self, db: Session) -> List[Dict[str, Any]]:
        """Faturamento dos últimos 7 dias agrupado por dia da semana"""
        since = datetime.utcnow() - timedelta(days=7)
        payments = db.query(Payment.amount, Payment.created_at).filter(
            Payment.created_at >= since
        ).all()

        totals = {label: 0.0 for label in WEEKDAY_LABELS}
        for amount, created_at in payments:
            # weekday(): segunda = 0; o rótulo começa no domingo
            label = WEEKDAY_LABELS[(to_local(created_at).weekday() + 1) % 7]
            totals[label] += float(amount or 0)

        return [{"name": label, "total": totals[label]} for label in WEEKDAY_LABELS]

report_service = ReportService()
