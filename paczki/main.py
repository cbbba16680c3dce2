"""
Paczki - główna aplikacja FastAPI.
Walidacja NIP, dane z rejestrów, powiadomienia mailowe i realizacja list życzeń.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from . import __version__
from .config import Settings, get_settings
from .models.notifications import (
    ContactFormRequest,
    LeadEmailRequest,
    OrderConfirmationRequest,
    WelcomeEmailRequest,
)
from .models.wishlist import AnimalSummary, FulfillmentRecord, FulfillmentResult, WishlistItem
from .services.email_service import get_email_service
from .services.fulfillment_service import FulfillmentService
from .services.registry_client import get_registry_client
from .services.wishlist_repository import RepositoryError, WishlistRepository, get_wishlist_repository
from .utils.fulfillment import aggregate_purchases, compute_fulfillment
from .utils.validators import NIP_PATTERN, clean_nip, format_nip, is_valid_nip

# Konfiguracja logowania
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Singletony serwisów (zamykane w lifespan)
_registry_client = None
_email_service = None
_wishlist_repository: Optional[WishlistRepository] = None


def get_registry():
    """Dependency injection dla klienta rejestrów."""
    global _registry_client
    if _registry_client is None:
        _registry_client = get_registry_client(get_settings())
    return _registry_client


def get_email():
    """Dependency injection dla serwisu email."""
    global _email_service
    if _email_service is None:
        _email_service = get_email_service(get_settings())
    return _email_service


def get_repository() -> WishlistRepository:
    """Dependency injection dla repozytorium list życzeń."""
    global _wishlist_repository
    if _wishlist_repository is None:
        _wishlist_repository = get_wishlist_repository(get_settings())
    return _wishlist_repository


def get_fulfillment_service(
    repository: WishlistRepository = Depends(get_repository),
) -> FulfillmentService:
    return FulfillmentService(repository)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Zarządzanie cyklem życia aplikacji."""
    global _registry_client, _email_service, _wishlist_repository
    logger.info("Starting Paczki service...")

    yield

    logger.info("Shutting down Paczki service...")
    for service in (_registry_client, _email_service, _wishlist_repository):
        if service is not None:
            await service.close()
    _registry_client = _email_service = _wishlist_repository = None


app = FastAPI(
    title="Paczki",
    description="Lista życzeń dla zwierząt: walidacja NIP, rejestry CEIDG/KRS, powiadomienia, realizacja potrzeb",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type", "x-api-key"],
)


# === Modele API ===

class HealthResponse(BaseModel):
    """Response health check."""
    status: str
    version: str
    environment: str


class ErrorResponse(BaseModel):
    """Response błędu."""
    error: str


class NIPRequest(BaseModel):
    nip: str = ""


class NIPValidationResponse(BaseModel):
    nip: str
    valid: bool
    formatted: Optional[str] = None


class FulfillmentRequest(BaseModel):
    """Lista życzeń i zakupy do wyliczenia postępu (bez bazy)."""
    items: list[WishlistItem] = Field(default_factory=list)
    purchases: list[FulfillmentRecord] = Field(default_factory=list)


class SuccessResponse(BaseModel):
    success: bool


class ContactFormResponse(SuccessResponse):
    message: str


# === Autoryzacja ===

async def verify_api_key(
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> bool:
    """
    Weryfikuje API key z headera.
    Akceptuje:
    - X-API-Key: <key>
    - Authorization: Bearer <key>
    """
    # W development można pominąć autoryzację
    if settings.environment == "development" and not settings.api_key:
        return True

    if settings.api_key:
        if x_api_key and x_api_key == settings.api_key:
            return True

        if authorization and authorization.startswith("Bearer "):
            if authorization[7:] == settings.api_key:
                return True

    raise HTTPException(
        status_code=401,
        detail="Invalid or missing API key",
        headers={"WWW-Authenticate": "Bearer"},
    )


# === Endpointy ===

@app.get("/", response_model=HealthResponse)
@app.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)):
    """Health check."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=settings.environment,
    )


@app.post("/validate-nip", response_model=NIPValidationResponse)
async def validate_nip(
    request: NIPRequest,
    _authorized: bool = Depends(verify_api_key),
):
    """Sprawdza sumę kontrolną NIP i zwraca postać XXX-XXX-XX-XX."""
    valid = is_valid_nip(request.nip)
    return NIPValidationResponse(
        nip=clean_nip(request.nip),
        valid=valid,
        formatted=format_nip(request.nip) if valid else None,
    )


@app.post(
    "/fetch-krs-data",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid NIP"},
        404: {"model": ErrorResponse, "description": "Not found"},
        502: {"model": ErrorResponse, "description": "Registry error"},
    },
)
async def fetch_krs_data(
    request: NIPRequest,
    _authorized: bool = Depends(verify_api_key),
    registry=Depends(get_registry),
):
    """
    Pobiera dane organizacji z rejestrów CEIDG i KRS.

    Body:
    ```json
    {"nip": "5260001246"}
    ```
    """
    nip = clean_nip(request.nip)

    if not NIP_PATTERN.match(nip):
        raise HTTPException(status_code=400, detail="Nieprawidłowy format NIP (wymagane 10 cyfr)")

    if not is_valid_nip(nip):
        raise HTTPException(status_code=400, detail="Nieprawidłowa suma kontrolna NIP")

    result = await registry.lookup_nip(nip)

    if result.error:
        raise HTTPException(status_code=502, detail=result.error)

    if not result.found:
        raise HTTPException(
            status_code=404,
            detail="Nie znaleziono danych dla podanego NIP. Sprawdź poprawność numeru.",
        )

    return {"success": True, "data": result.data.model_dump(exclude_none=True)}


@app.post("/send-lead-email", response_model=SuccessResponse)
async def send_lead_email(
    request: LeadEmailRequest,
    _authorized: bool = Depends(verify_api_key),
    email_service=Depends(get_email),
):
    """Wysyła do fundacji zgłoszenie nowej organizacji."""
    result = await email_service.send_lead_email(request)
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error or "Nie udało się wysłać maila")
    return SuccessResponse(success=True)


@app.post("/send-contact-form", response_model=ContactFormResponse)
async def send_contact_form(
    request: ContactFormRequest,
    _authorized: bool = Depends(verify_api_key),
    email_service=Depends(get_email),
    repository: WishlistRepository = Depends(get_repository),
):
    """
    Zapisuje wiadomość z formularza kontaktowego i powiadamia fundację.
    Wiadomość jest już w bazie - błąd wysyłki maila nie psuje odpowiedzi.
    """
    error = request.validate_fields()
    if error:
        raise HTTPException(status_code=400, detail=error)

    form = request.normalized()
    logger.info("Formularz kontaktowy od: %s", form.email)

    try:
        await repository.save_contact_message(form)
    except RepositoryError as e:
        logger.error("Nie zapisano wiadomości kontaktowej: %s", e)
        raise HTTPException(status_code=500, detail="Błąd zapisu do bazy danych")

    result = await email_service.send_contact_email(form)
    if not result.success:
        logger.warning("Wiadomość zapisana, ale mail nie wysłany: %s", result.error)

    return ContactFormResponse(
        success=True,
        message="Dziękujemy za wiadomość! Odpowiemy najszybciej jak to możliwe.",
    )


@app.post("/send-welcome-email", response_model=SuccessResponse)
async def send_welcome_email(
    request: WelcomeEmailRequest,
    _authorized: bool = Depends(verify_api_key),
    email_service=Depends(get_email),
):
    """Wysyła powitanie do nowego kupującego."""
    result = await email_service.send_welcome_email(request)
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error or "Nie udało się wysłać maila")
    return SuccessResponse(success=True)


@app.post("/send-order-confirmation", response_model=SuccessResponse)
async def send_order_confirmation(
    request: OrderConfirmationRequest,
    _authorized: bool = Depends(verify_api_key),
    email_service=Depends(get_email),
):
    """Wysyła darczyńcy potwierdzenie opłaconego zamówienia."""
    result = await email_service.send_order_confirmation(request)
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error or "Nie udało się wysłać maila")
    return SuccessResponse(success=True)


@app.post("/wishlist/fulfillment", response_model=FulfillmentResult)
async def wishlist_fulfillment(
    request: FulfillmentRequest,
    _authorized: bool = Depends(verify_api_key),
):
    """Wylicza postęp realizacji dla przekazanej listy życzeń i zakupów."""
    purchased = aggregate_purchases(request.purchases, scoped=True)
    return compute_fulfillment(request.items, purchased)


@app.get("/animals/{animal_id}/wishlist", response_model=AnimalSummary)
async def animal_wishlist(
    animal_id: str,
    _authorized: bool = Depends(verify_api_key),
    service: FulfillmentService = Depends(get_fulfillment_service),
):
    """Lista życzeń zwierzęcia ze stanem realizacji każdej pozycji."""
    try:
        summary = await service.animal_wishlist(animal_id)
    except RepositoryError as e:
        raise HTTPException(status_code=502, detail=str(e))

    if summary is None:
        raise HTTPException(status_code=404, detail="Nie znaleziono zwierzęcia")
    return summary


@app.get("/organizations/{organization_id}/animals", response_model=list[AnimalSummary])
async def organization_animals(
    organization_id: str,
    _authorized: bool = Depends(verify_api_key),
    service: FulfillmentService = Depends(get_fulfillment_service),
):
    """Zwierzęta organizacji od najbardziej potrzebujących, ze statystykami dostaw."""
    try:
        return await service.animals_by_need(organization_id, with_quantity_progress=True)
    except RepositoryError as e:
        raise HTTPException(status_code=502, detail=str(e))


# === Error handlers ===

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handler dla HTTPException."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handler dla nieoczekiwanych wyjątków."""
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
    )


# === Uruchomienie lokalne ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "paczki.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8080")),
        reload=True,
    )
