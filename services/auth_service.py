"""
Phone allow-list authentication.
Encapsulates the login and session-check flows behind the auth endpoints.
"""
from typing import List, Optional, Set, Tuple

from core.config import Settings, get_settings
from core.exceptions import AuthorizationError, BackingStoreError, ValidationError
from core.logger import mask_phone, setup_logger
from core.parsing import PHONE_COLUMNS, parse_csv
from core.phone import normalize_phone
from core.schema import AllowedPhoneRecord, LoginResponse, SessionEntry
from core.sessions import SessionRegistry
from core.store import BlobStore

logger = setup_logger(__name__)


class AllowListAuthorizer:
    """Answers whether a phone number may log in."""

    def __init__(self, store: BlobStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()

    def normalize(self, phone_number: Optional[str]) -> str:
        return normalize_phone(phone_number, self.settings.country_code)

    def load_records(self) -> Tuple[List[AllowedPhoneRecord], int]:
        """
        Read and parse the allow-list snapshot.

        Returns:
            Tuple of (records in file order, number of skipped rows)

        Raises:
            BackingStoreError: If the snapshot cannot be read
        """
        text = self.store.read_text(self.settings.allowed_phones_file)
        parsed = parse_csv(text, PHONE_COLUMNS, source=self.settings.allowed_phones_file)

        records = []
        for row in parsed.rows:
            phone_number, name, status = row.fields[:PHONE_COLUMNS]
            records.append(AllowedPhoneRecord(phone_number=phone_number, name=name, status=status))

        return records, parsed.skipped_rows

    def is_allowed(self, phone_number: Optional[str]) -> bool:
        """
        Check a phone number against the active allow-list entries.

        Fails closed: an unreadable snapshot denies access. The two cases are
        only told apart in the logs.

        Args:
            phone_number: Phone number in any format

        Returns:
            True if an active record matches after normalization
        """
        wanted = self.normalize(phone_number)
        if not wanted:
            return False

        try:
            records, _ = self.load_records()
        except BackingStoreError as e:
            logger.error(
                f"Allow-list backing store unavailable, denying {mask_phone(wanted)}: "
                f"{e.message} {e.details}"
            )
            return False

        for record in records:
            if record.is_active and self.normalize(record.phone_number) == wanted:
                return True

        logger.info(f"Allow-list denied {mask_phone(wanted)}")
        return False

    def list_allowed_numbers(self) -> Set[str]:
        """
        Normalized numbers of every active record.

        Raises:
            BackingStoreError: If the snapshot cannot be read
        """
        records, _ = self.load_records()
        return {
            self.normalize(record.phone_number)
            for record in records
            if record.is_active and self.normalize(record.phone_number)
        }


class AuthService:
    """Login and session validation for the portal."""

    def __init__(
        self,
        authorizer: AllowListAuthorizer,
        registry: SessionRegistry,
        settings: Optional[Settings] = None,
    ):
        self.authorizer = authorizer
        self.registry = registry
        self.settings = settings or get_settings()

    def login(self, phone_number: Optional[str]) -> LoginResponse:
        """
        Admit an allow-listed phone number and open a session.

        Args:
            phone_number: Phone number as typed by the member

        Returns:
            LoginResponse carrying the new session token

        Raises:
            ValidationError: If the phone number is missing or has no digits
            AuthorizationError: If the number is not allow-listed
        """
        if phone_number is None or not str(phone_number).strip():
            raise ValidationError("Número de teléfono es requerido")

        normalized = self.authorizer.normalize(phone_number)
        if not normalized:
            raise ValidationError(
                "Número de teléfono inválido",
                details={"phone_number": mask_phone(phone_number)}
            )

        if not self.authorizer.is_allowed(normalized):
            raise AuthorizationError(
                "Acceso denegado. Este número de teléfono no está autorizado para usar esta aplicación.",
                details={"phone_number": mask_phone(normalized)}
            )

        token = self.registry.create_session(normalized)
        return LoginResponse(
            session_token=token,
            phone_number=normalized,
            message="Inicio de sesión exitoso",
        )

    def check_session(self, session_token: Optional[str]) -> SessionEntry:
        """
        Validate a session token.

        Raises:
            ValidationError: If no token was supplied
            SessionError: If the token is unknown or expired
        """
        if session_token is None or not str(session_token).strip():
            raise ValidationError("Se requiere token de sesión")
        return self.registry.validate_session(session_token)

    def list_allowed_phones(self) -> Tuple[List[AllowedPhoneRecord], int]:
        """All allow-list records for administrative listing."""
        return self.authorizer.load_records()


def create_auth_service(store: BlobStore, settings: Optional[Settings] = None) -> AuthService:
    """Build an AuthService with a fresh session registry."""
    settings = settings or get_settings()
    registry = SessionRegistry(
        ttl=settings.session_ttl,
        token_bytes=settings.session_token_bytes,
    )
    return AuthService(AllowListAuthorizer(store, settings), registry, settings)
