"""
Modele wejściowe formularzy wysyłanych mailem (zgłoszenie organizacji, kontakt).
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class LeadEmailRequest(BaseModel):
    """Zgłoszenie organizacji z formularza na stronie głównej."""

    organization_name: str = Field(..., alias="organizationName", max_length=200)
    nip: str = Field(..., max_length=20)
    email: str = Field(..., max_length=255)
    phone: str = Field("", max_length=30)

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {
                "organizationName": "Fundacja Psia Łapa",
                "nip": "526-000-12-46",
                "email": "kontakt@psialapa.pl",
                "phone": "+48 601 234 567",
            }
        },
    }

    @field_validator("organization_name", "nip", "email", "phone", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value


class ContactFormRequest(BaseModel):
    """
    Wiadomość z formularza kontaktowego.
    Reguły sprawdzane w validate_fields() - pierwszy błąd trafia do użytkownika.
    """

    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    message: str = ""

    def validate_fields(self) -> Optional[str]:
        """Zwraca komunikat pierwszego błędu walidacji lub None."""
        if not self.name or not self.name.strip():
            return "Imię jest wymagane"
        if not self.email or not self.email.strip() or "@" not in self.email:
            return "Prawidłowy email jest wymagany"
        if not self.message or not self.message.strip():
            return "Wiadomość jest wymagana"
        if len(self.name) > 100:
            return "Imię jest za długie"
        if len(self.email) > 255:
            return "Email jest za długi"
        if len(self.message) > 2000:
            return "Wiadomość jest za długa"
        return None

    def normalized(self) -> "ContactFormRequest":
        """Przycięte pola, email małymi literami, pusty telefon jako None."""
        return ContactFormRequest(
            name=self.name.strip(),
            email=self.email.strip().lower(),
            phone=(self.phone or "").strip() or None,
            message=self.message.strip(),
        )


class WelcomeEmailRequest(BaseModel):
    """Powitanie nowego kupującego po rejestracji."""

    email: str = Field(..., max_length=255)
    display_name: Optional[str] = Field(None, alias="displayName", max_length=100)

    model_config = {"populate_by_name": True}

    @property
    def greeting_name(self) -> str:
        """Nazwa do powitania - bez displayName część adresu przed @."""
        return (self.display_name or "").strip() or self.email.split("@")[0]


class OrderConfirmationItem(BaseModel):
    """
    Pozycja potwierdzenia darowizny.
    Przyjmuje też kształt z zapytania Supabase: products{name,price}, animals{name}.
    """

    product_name: str
    animal_name: Optional[str] = None
    quantity: int = Field(1, ge=1)
    unit_price: float = Field(0.0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def flatten_relations(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        product = data.pop("products", None) or {}
        animal = data.pop("animals", None) or {}
        data.setdefault("product_name", product.get("name"))
        if animal.get("name"):
            data.setdefault("animal_name", animal["name"])
        if data.get("unit_price") is None and product.get("price") is not None:
            data["unit_price"] = product["price"]
        return data

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


class OrderConfirmationRequest(BaseModel):
    """Potwierdzenie opłaconego zamówienia dla darczyńcy."""

    order_id: str = Field(..., alias="orderId", min_length=1)
    customer_email: str = Field(..., alias="customerEmail", max_length=255)
    customer_name: str = Field("", alias="customerName", max_length=200)
    total_amount: float = Field(..., alias="totalAmount", ge=0)
    items: list[OrderConfirmationItem] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @property
    def order_number(self) -> str:
        """Krótki numer zamówienia - 8 pierwszych znaków ID wielkimi literami."""
        return self.order_id[:8].upper()


class EmailResult(BaseModel):
    """Wynik wysyłki maila."""

    success: bool = False
    message_id: Optional[str] = Field(None, description="ID wiadomości z Resend")
    error: Optional[str] = None
