from datetime import datetime, time, timedelta, timezone

from models import Payment
from services.report_service import WEEKDAY_LABELS
from utils.date_utils import get_local_date, get_local_datetime, month_start


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_dashboard_summary(auth_client, book):
    today = get_local_date().isoformat()
    done = book(date=today, total_price=100).json()
    book(date=today, start_time="11:00:00")
    book(date="2020-01-01")
    auth_client.post(f"/appointments/{done['id']}/complete", json={"method": "pix"})

    summary = auth_client.get("/reports/dashboard").json()

    assert summary["today_appointments"] == 2
    assert summary["total_clients"] == 1
    assert summary["total_services"] == 2
    assert summary["monthly_revenue"] == 100
    assert [p["name"] for p in summary["revenue_chart"]] == ["Dom", "Seg", "Ter", "Qua", "Qui", "Sex", "Sáb"]
    assert sum(p["total"] for p in summary["revenue_chart"]) == 100


def test_dashboard_on_empty_database(auth_client):
    summary = auth_client.get("/reports/dashboard").json()

    assert summary["today_appointments"] == 0
    assert summary["monthly_revenue"] == 0
    assert all(p["total"] == 0 for p in summary["revenue_chart"])


def _pay(db_session, appointment_id, amount, created_at):
    db_session.add(Payment(
        appointment_id=appointment_id,
        amount=amount,
        method="pix",
        commission_amount=0,
        created_at=created_at,
    ))
    db_session.commit()


def test_monthly_revenue_starts_at_local_midnight(auth_client, book, db_session):
    first_day = month_start(get_local_date())
    # 01:00 UTC do dia 1 ainda é 22:00 do último dia do mês anterior no salão
    previous_month = book().json()
    _pay(db_session, previous_month["id"], 100, datetime.combine(first_day, time(1, 0)))
    # 04:00 UTC do dia 1 já é 01:00 do dia 1 no salão
    this_month = book(start_time="10:00:00").json()
    _pay(db_session, this_month["id"], 30, datetime.combine(first_day, time(4, 0)))

    summary = auth_client.get("/reports/dashboard").json()

    assert summary["monthly_revenue"] == 30


def test_weekly_revenue_uses_salon_weekday(auth_client, book, db_session):
    local_evening = (get_local_datetime() - timedelta(days=1)).replace(hour=22, minute=0, second=0, microsecond=0)
    created_at = local_evening.astimezone(timezone.utc).replace(tzinfo=None)
    appointment = book().json()
    _pay(db_session, appointment["id"], 50, created_at)

    chart = {p["name"]: p["total"] for p in auth_client.get("/reports/dashboard").json()["revenue_chart"]}

    local_label = WEEKDAY_LABELS[(local_evening.weekday() + 1) % 7]
    utc_label = WEEKDAY_LABELS[(created_at.weekday() + 1) % 7]
    assert local_label != utc_label
    assert chart[local_label] == 50
    assert chart[utc_label] == 0


def test_dashboard_counts_inactive_clients_and_services(auth_client, salon):
    auth_client.post(f"/clients/{salon.client['id']}/deactivate")
    auth_client.put(f"/services/{salon.corte['id']}", json={"active": False})

    summary = auth_client.get("/reports/dashboard").json()

    assert summary["total_clients"] == 1
    assert summary["total_services"] == 2
