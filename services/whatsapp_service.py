from typing import Optional
from urllib.parse import quote

from config import PUBLIC_BASE_URL, SALON_NAME
from models import Appointment

WHATSAPP_BASE_URL = "https://wa.me"


class WhatsAppService:
    def __init__(self, public_base_url: str = PUBLIC_BASE_URL, salon_name: str = SALON_NAME):
        self.public_base_url = public_base_url.rstrip("/")
        self.salon_name = salon_name

    def format_phone(self, phone: Optional[str]) -> str:
        """
        Normaliza o telefone para o formato do WhatsApp: apenas dígitos,
        com o código do Brasil (55) na frente.
        """
        digits = "".join(ch for ch in (phone or "") if ch.isdigit())
        if len(digits) < 10:
            raise ValueError("Cliente sem telefone válido para WhatsApp")
        if not digits.startswith("55"):  # Código do Brasil
            digits = "55" + digits
        return digits

    def receipt_url(self, appointment_id: int) -> str:
        return f"{self.public_base_url}/comprovante/{appointment_id}"

    def build_link(self, phone: str, message: str) -> str:
        return f"{WHATSAPP_BASE_URL}/{self.format_phone(phone)}?text={quote(message)}"

    def build_receipt_message(self, name: Optional[str], receipt_url: str) -> str:
        return (
            f"*Olá, {name or 'cliente'}!* 😊\n\n"
            f"Seu atendimento no *{self.salon_name}* foi concluído.\n\n"
            f"📄 *Acesse seu comprovante digital aqui:* \n{receipt_url}\n\n"
            f"Agradecemos a preferência! 💇‍♂️✨"
        )

    def build_receipt_link(self, appointment: Appointment) -> str:
        """Link wa.me com o comprovante; ValueError se o cliente não tiver telefone válido"""
        client = appointment.client
        phone = client.phone if client else None
        message = self.build_receipt_message(client.name if client else None, self.receipt_url(appointment.id))
        return self.build_link(phone, message)

whatsapp_service = WhatsAppService()
