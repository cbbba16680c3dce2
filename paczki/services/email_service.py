"""
Serwis wysyłki maili przez Resend API.
Powiadomienia fundacji (zgłoszenia organizacji, formularz kontaktowy)
oraz maile do darczyńców (powitanie, potwierdzenie darowizny).
"""

import logging
from typing import Optional

import httpx

from ..config import Settings, get_settings
from ..models.notifications import (
    ContactFormRequest,
    EmailResult,
    LeadEmailRequest,
    OrderConfirmationRequest,
    WelcomeEmailRequest,
)
from ..utils.validators import escape_html

logger = logging.getLogger(__name__)


def render_lead_email(lead: LeadEmailRequest) -> tuple[str, str]:
    """Temat i treść HTML maila o nowym zgłoszeniu organizacji."""
    subject = f"Nowe zgłoszenie organizacji: {lead.organization_name}"
    html = (
        "<h1>Nowe zgłoszenie organizacji</h1>"
        f"<p><strong>Nazwa:</strong> {escape_html(lead.organization_name)}</p>"
        f"<p><strong>NIP:</strong> {escape_html(lead.nip)}</p>"
        f"<p><strong>Email:</strong> {escape_html(lead.email)}</p>"
        f"<p><strong>Telefon:</strong> {escape_html(lead.phone)}</p>"
    )
    return subject, html


def render_contact_email(form: ContactFormRequest) -> tuple[str, str]:
    """Temat i treść HTML maila z formularza kontaktowego."""
    subject = f"Nowa wiadomość kontaktowa od {form.name}"
    message = escape_html(form.message).replace("\n", "<br>")
    html = (
        "<h1>Nowa wiadomość z formularza kontaktowego</h1>"
        f"<p><strong>Imię:</strong> {escape_html(form.name)}</p>"
        f"<p><strong>Email:</strong> {escape_html(form.email)}</p>"
        f"<p><strong>Telefon:</strong> {escape_html(form.phone) or '-'}</p>"
        f"<p><strong>Wiadomość:</strong></p><p>{message}</p>"
    )
    return subject, html


def render_welcome_email(request: WelcomeEmailRequest) -> tuple[str, str]:
    """Temat i treść HTML powitania nowego kupującego."""
    name = request.greeting_name
    subject = f"Witaj w Paczki w Maśle, {name}!"
    html = (
        "<h1>Witamy w rodzinie!</h1>"
        f"<p>Cześć <strong>{escape_html(name)}</strong>!</p>"
        "<p>Dziękujemy za dołączenie do <strong>Paczki w Maśle</strong>. "
        "Sprawdź skrzynkę email - wysłaliśmy link aktywacyjny.</p>"
        "<ul>"
        "<li>Przeglądaj zwierzaki z list życzeń schronisk</li>"
        "<li>Kupuj prezenty z list życzeń</li>"
        "<li>Śledź swoje zakupy</li>"
        "</ul>"
    )
    return subject, html


def render_order_confirmation(order: OrderConfirmationRequest) -> tuple[str, str]:
    """Temat i treść HTML potwierdzenia darowizny z tabelą pozycji."""
    subject = f"Potwierdzenie darowizny - zamówienie {order.order_number}"

    rows = []
    for item in order.items:
        label = escape_html(item.product_name)
        if item.animal_name:
            label += f" (dla {escape_html(item.animal_name)})"
        rows.append(
            f"<tr><td>{label}</td><td>{item.quantity}</td>"
            f"<td>{item.unit_price:.2f} zł</td><td>{item.line_total:.2f} zł</td></tr>"
        )

    html = (
        "<h1>Dziękujemy za Twoją darowiznę!</h1>"
        f"<p>Cześć {escape_html(order.customer_name)}!</p>"
        f"<p><strong>Numer zamówienia:</strong> {escape_html(order.order_number)}</p>"
        "<table><thead><tr><th>Produkt</th><th>Ilość</th><th>Cena jedn.</th><th>Razem</th></tr></thead>"
        f"<tbody>{''.join(rows)}</tbody></table>"
        f"<p><strong>Suma całkowita: {order.total_amount:.2f} zł</strong></p>"
        "<p>Produkty zostaną dostarczone do schroniska, aby pomóc zwierzętom, które najbardziej tego potrzebują.</p>"
    )
    return subject, html


class EmailService:
    """Klient Resend API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self._http_client = http_client

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=httpx.Timeout(self.settings.http_timeout))
        return self._http_client

    async def close(self):
        """Zamknij klienta HTTP."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def send(
        self,
        to: list[str],
        subject: str,
        html: str,
        reply_to: Optional[str] = None,
    ) -> EmailResult:
        """
        Wysyła mail przez Resend.

        Args:
            to: Lista odbiorców
            subject: Temat
            html: Treść HTML
            reply_to: Adres do odpowiedzi (opcjonalny)

        Returns:
            EmailResult - błędy nie są rzucane dalej
        """
        if not self.settings.resend_api_key:
            logger.warning("Brak RESEND_API_KEY - wysyłka maili niedostępna")
            return EmailResult(success=False, error="Brak klucza RESEND_API_KEY")

        payload = {
            "from": self.settings.email_from,
            "to": to,
            "subject": subject,
            "html": html,
        }
        if reply_to:
            payload["reply_to"] = reply_to

        try:
            response = await self.http_client.post(
                self.settings.resend_api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.settings.resend_api_key}"},
            )
            response.raise_for_status()
            body = response.json()
            message_id = body.get("id") if isinstance(body, dict) else None

            logger.info("Email wysłany: %s (id=%s)", subject, message_id)
            return EmailResult(success=True, message_id=message_id)

        except httpx.HTTPStatusError as e:
            logger.error("Resend HTTP error: %s", e)
            return EmailResult(success=False, error=f"Resend HTTP {e.response.status_code}")
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Resend error: %s", e)
            return EmailResult(success=False, error=str(e))

    async def send_lead_email(self, lead: LeadEmailRequest) -> EmailResult:
        """Powiadamia fundację o nowym zgłoszeniu organizacji."""
        logger.info("Wysyłam zgłoszenie organizacji: %s", lead.organization_name)
        subject, html = render_lead_email(lead)
        return await self.send([self.settings.lead_notification_to], subject, html)

    async def send_contact_email(self, form: ContactFormRequest) -> EmailResult:
        """Przekazuje wiadomość z formularza kontaktowego do fundacji."""
        subject, html = render_contact_email(form)
        return await self.send(
            [self.settings.lead_notification_to],
            subject,
            html,
            reply_to=form.email,
        )

    async def send_welcome_email(self, request: WelcomeEmailRequest) -> EmailResult:
        """Powitanie nowego kupującego."""
        logger.info("Wysyłam email powitalny do: %s", request.email)
        subject, html = render_welcome_email(request)
        return await self.send([request.email], subject, html)

    async def send_order_confirmation(self, order: OrderConfirmationRequest) -> EmailResult:
        """Potwierdzenie darowizny dla darczyńcy."""
        logger.info("Wysyłam potwierdzenie zamówienia %s do: %s", order.order_number, order.customer_email)
        subject, html = render_order_confirmation(order)
        return await self.send([order.customer_email], subject, html)


class EmailServiceMock:
    """Mock serwisu email - zapamiętuje wysłane wiadomości."""

    def __init__(self):
        self.sent: list[dict] = []

    async def send_lead_email(self, lead: LeadEmailRequest) -> EmailResult:
        subject, html = render_lead_email(lead)
        self.sent.append({"subject": subject, "html": html})
        return EmailResult(success=True, message_id=f"mock-{len(self.sent)}")

    async def send_contact_email(self, form: ContactFormRequest) -> EmailResult:
        subject, html = render_contact_email(form)
        self.sent.append({"subject": subject, "html": html, "reply_to": form.email})
        return EmailResult(success=True, message_id=f"mock-{len(self.sent)}")

    async def send_welcome_email(self, request: WelcomeEmailRequest) -> EmailResult:
        subject, html = render_welcome_email(request)
        self.sent.append({"subject": subject, "html": html, "to": request.email})
        return EmailResult(success=True, message_id=f"mock-{len(self.sent)}")

    async def send_order_confirmation(self, order: OrderConfirmationRequest) -> EmailResult:
        subject, html = render_order_confirmation(order)
        self.sent.append({"subject": subject, "html": html, "to": order.customer_email})
        return EmailResult(success=True, message_id=f"mock-{len(self.sent)}")

    async def close(self):
        pass


def get_email_service(settings: Optional[Settings] = None, use_mock: bool = False):
    """Factory - poza produkcją bez klucza Resend zwraca mocka."""
    settings = settings or get_settings()
    if use_mock or (not settings.resend_api_key and not settings.is_production):
        if not use_mock:
            logger.warning("Brak RESEND_API_KEY - używam mocka email")
        return EmailServiceMock()
    return EmailService(settings)
