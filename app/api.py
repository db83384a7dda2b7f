"""
FastAPI routes for the member portal.
Thin API layer over the auth and transaction services.
"""
from pathlib import Path

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.templating import Jinja2Templates

from core.config import get_settings
from core.exceptions import BackingStoreError, PortalException
from core.logger import setup_logger
from core.schema import (
    AllowedPhonesResponse,
    CheckSessionRequest,
    LoginRequest,
    LoginResponse,
    SessionResponse,
    TransactionsResponse,
)
from core.store import FileBlobStore
from services.auth_service import AuthService, create_auth_service
from services.transaction_service import TransactionService

logger = setup_logger(__name__)
settings = get_settings()

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Club finance dashboard behind a phone number allow-list",
    version="1.0.0"
)

# Setup templates
templates_dir = Path(__file__).parent.parent / "templates"
templates = Jinja2Templates(directory=str(templates_dir))

# Service instances; the session registry lives inside the auth service
store = FileBlobStore(settings.data_path)
auth_service = create_auth_service(store, settings)
transaction_service = TransactionService(store, settings)


def get_auth_service() -> AuthService:
    return auth_service


def get_transaction_service() -> TransactionService:
    return transaction_service


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(PortalException)
async def portal_exception_handler(request: Request, exc: PortalException):
    """Render domain errors as {"error": message}."""
    if exc.status_code >= 500:
        logger.error(f"{request.url.path} failed: {exc.message} {exc.details}")
    else:
        logger.info(f"{request.url.path} rejected ({exc.status_code}): {exc.message}")
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors, not 422s."""
    logger.info(f"{request.url.path} malformed request: {exc.errors()}")
    return error_response(400, "Solicitud inválida")


@app.exception_handler(Exception)
async def unexpected_exception_handler(request: Request, exc: Exception):
    logger.error(f"{request.url.path} unexpected error: {exc}", exc_info=exc)
    return error_response(500, "Error interno del servidor")


@app.get("/", response_class=HTMLResponse)
async def dashboard(request: Request):
    """Render the transactions dashboard."""
    return templates.TemplateResponse(
        request, "index.html", {"app_name": settings.app_name}
    )


@app.get("/login", response_class=HTMLResponse)
async def login_page(request: Request):
    """Render the phone number login form."""
    return templates.TemplateResponse(
        request, "login.html", {"app_name": settings.app_name}
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "club_ledger_portal",
        "version": "1.0.0"
    }


@app.get("/favicon.ico")
async def favicon():
    """Return empty response for favicon to avoid 404 errors."""
    return Response(status_code=204)


@app.post("/api/auth/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    service: AuthService = Depends(get_auth_service),
):
    """
    Log in with an allow-listed phone number.

    Returns:
        200 with a session token; 400 missing/invalid phone; 403 not allowed
    """
    return service.login(payload.phone_number)


@app.post("/api/auth/check-session", response_model=SessionResponse)
def check_session(
    payload: CheckSessionRequest,
    service: AuthService = Depends(get_auth_service),
):
    """
    Validate a session token.

    Returns:
        200 with the session identity; 400 missing token; 401 invalid or expired
    """
    entry = service.check_session(payload.session_token)
    return SessionResponse(
        phone_number=entry.phone_number,
        authenticated_at=entry.authenticated_at_ms,
    )


@app.get("/api/auth/allowed-phones", response_model=AllowedPhonesResponse)
def allowed_phones(service: AuthService = Depends(get_auth_service)):
    """List allow-list records for administration."""
    try:
        records, skipped = service.list_allowed_phones()
    except BackingStoreError as e:
        logger.error(f"Error reading allowed phones: {e.message} {e.details}")
        body = AllowedPhonesResponse(
            success=False,
            error="Error al leer números de teléfono permitidos",
        )
        return JSONResponse(status_code=500, content=body.model_dump(by_alias=True, mode="json"))

    return AllowedPhonesResponse(allowed_phones=records, skipped_rows=skipped)


@app.get("/api/transactions", response_model=TransactionsResponse)
def list_transactions(
    filter_name: str = Query(default="all", alias="filter"),
    service: TransactionService = Depends(get_transaction_service),
):
    """
    List club transactions with totals.

    Args:
        filter_name: "all", "income" or "expenses" (query parameter "filter")
    """
    listing = service.list_transactions(filter_name)
    body = TransactionsResponse(
        success=listing.success,
        transactions=listing.transactions,
        summary=listing.summary,
        skipped_rows=listing.skipped_rows,
        error=listing.error,
    )

    if not listing.success:
        return JSONResponse(status_code=500, content=body.model_dump(by_alias=True, mode="json"))

    return body


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
