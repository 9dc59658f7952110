"""
Utilitários para datas e horários no fuso horário do salão (UTC-3, Brasília)
"""

from datetime import datetime, date, time, timezone, timedelta

SALON_TZ = timezone(timedelta(hours=-3))

def get_local_datetime():
    """
    Obtém a data/hora atual no fuso horário do salão
    """
    return datetime.now(timezone.utc).astimezone(SALON_TZ)

def get_local_date():
    """
    Obtém apenas a data atual no fuso horário do salão
    """
    return get_local_datetime().date()

def add_days(base: date, days: int) -> date:
    """Soma dias corridos a uma data"""
    return base + timedelta(days=days)

def add_minutes(start: time, minutes: int):
    """
    Soma minutos a um horário. Retorna None quando o resultado passa da meia-noite.
    """
    combined = datetime.combine(date.min, start) + timedelta(minutes=minutes)
    if combined.date() != date.min:
        return None
    return combined.time()

def month_start(day: date) -> date:
    return day.replace(day=1)

def local_midnight_utc(day: date) -> datetime:
    """
    Meia-noite do dia no fuso do salão, convertida para UTC sem tzinfo
    (mesmo formato de created_at no banco)
    """
    local_midnight = datetime.combine(day, time.min, tzinfo=SALON_TZ)
    return local_midnight.astimezone(timezone.utc).replace(tzinfo=None)

def to_local(utc_naive: datetime) -> datetime:
    """Converte um created_at (UTC sem tzinfo) para o fuso do salão"""
    return utc_naive.replace(tzinfo=timezone.utc).astimezone(SALON_TZ)
