"""
Unit tests for allow-list authorization and the login flow.
"""
import logging

import pytest

from core.exceptions import (
    AuthorizationError,
    ExpiredSessionError,
    InvalidSessionError,
    ValidationError,
)
from core.sessions import SessionRegistry
from core.store import FileBlobStore, MemoryBlobStore
from services.auth_service import AllowListAuthorizer, AuthService, create_auth_service


@pytest.fixture
def authorizer(store, settings):
    return AllowListAuthorizer(store, settings)


@pytest.fixture
def service(authorizer, settings, clock):
    return AuthService(authorizer, SessionRegistry(ttl=settings.session_ttl, clock=clock), settings)


def test_load_records(authorizer):
    """Test records are returned in file order with raw values."""
    records, skipped = authorizer.load_records()
    assert [r.phone_number for r in records] == ["+573001234567", "+573009876543", "+573106059758"]
    assert records[1].status == "inactive"
    assert skipped == 0


@pytest.mark.parametrize("phone", ["+573106059758", "573106059758", "3106059758", "310 605 9758"])
def test_active_number_allowed_in_any_format(authorizer, phone):
    """Test normalized comparison against active records."""
    assert authorizer.is_allowed(phone) is True


def test_inactive_number_denied(authorizer):
    """Test an otherwise matching inactive record does not authorize."""
    assert authorizer.is_allowed("+573009876543") is False


def test_unknown_and_empty_numbers_denied(authorizer):
    """Test misses and inputs without digits."""
    assert authorizer.is_allowed("+573000000000") is False
    assert authorizer.is_allowed("") is False
    assert authorizer.is_allowed(None) is False


def test_status_is_case_insensitive(settings):
    """Test "Active" counts as active."""
    store = MemoryBlobStore({"allowed-phones.csv": "phone_number,name,status\n3106059758,Juan, Active \n"})
    assert AllowListAuthorizer(store, settings).is_allowed("+573106059758") is True


def test_duplicate_records_any_active_wins(settings):
    """Test differently formatted duplicates are compared after normalization."""
    text = (
        "phone_number,name,status\n"
        "+573106059758,Juan,inactive\n"
        "310-605-9758,Juan,active\n"
    )
    store = MemoryBlobStore({"allowed-phones.csv": text})
    assert AllowListAuthorizer(store, settings).is_allowed("3106059758") is True


def test_unreadable_allow_list_fails_closed(tmp_path, settings):
    """Test a missing snapshot denies access instead of raising."""
    authorizer = AllowListAuthorizer(FileBlobStore(tmp_path / "missing"), settings)
    assert authorizer.is_allowed("+573106059758") is False


def test_list_allowed_numbers(authorizer):
    """Test only active records are listed, normalized."""
    assert authorizer.list_allowed_numbers() == {"3001234567", "3106059758"}


def test_zero_valid_rows_is_empty(settings):
    """Test a snapshot with only malformed rows yields no records."""
    store = MemoryBlobStore({"allowed-phones.csv": "phone_number,name,status\n3106059758,Juan\n"})
    authorizer = AllowListAuthorizer(store, settings)
    records, skipped = authorizer.load_records()
    assert records == []
    assert skipped == 1
    assert authorizer.list_allowed_numbers() == set()


def test_login_success(service, clock):
    """Test login mints a session for the normalized number."""
    response = service.login("+573106059758")
    assert response.success is True
    assert response.phone_number == "3106059758"
    assert response.message == "Inicio de sesión exitoso"

    entry = service.check_session(response.session_token)
    assert entry.phone_number == "3106059758"
    assert entry.authenticated_at == clock.now


@pytest.mark.parametrize("phone", [None, "", "   "])
def test_login_missing_phone(service, phone):
    """Test missing phone numbers are validation errors."""
    with pytest.raises(ValidationError) as exc_info:
        service.login(phone)
    assert exc_info.value.message == "Número de teléfono es requerido"


def test_login_malformed_phone(service):
    """Test phone numbers without digits are validation errors."""
    with pytest.raises(ValidationError):
        service.login("not a phone")


def test_login_denied(service):
    """Test inactive and unknown numbers are refused."""
    with pytest.raises(AuthorizationError):
        service.login("+573009876543")
    with pytest.raises(AuthorizationError):
        service.login("+573000000000")


def test_check_session_missing_token(service):
    """Test a missing token is a validation error."""
    with pytest.raises(ValidationError):
        service.check_session(None)
    with pytest.raises(ValidationError):
        service.check_session("")


def test_check_session_lifecycle(service, clock):
    """Test a session becomes expired, then invalid."""
    token = service.login("573106059758").session_token

    clock.advance(hours=23, minutes=59)
    assert service.check_session(token).phone_number == "3106059758"

    clock.advance(minutes=2)
    with pytest.raises(ExpiredSessionError):
        service.check_session(token)
    with pytest.raises(InvalidSessionError):
        service.check_session(token)


def test_allow_list_is_reread_every_request(data_dir, service):
    """Test edits to the snapshot apply without a restart."""
    assert service.authorizer.is_allowed("3001234567") is True
    (data_dir / "allowed-phones.csv").write_text(
        "phone_number,name,status\n+573001234567,Carlos,inactive\n", encoding="utf-8"
    )
    assert service.authorizer.is_allowed("3001234567") is False


def test_create_auth_service(store, settings):
    """Test the factory wires settings into the registry."""
    service = create_auth_service(store, settings)
    assert service.registry.ttl == settings.session_ttl
    assert service.registry.token_bytes == settings.session_token_bytes
    assert service.authorizer.store is store


def test_denial_and_outage_are_logged_apart(tmp_path, authorizer, settings, caplog):
    """Test a plain miss logs INFO and an unreadable snapshot logs ERROR."""
    with caplog.at_level(logging.INFO, logger="services.auth_service"):
        assert authorizer.is_allowed("+573000000000") is False
    denied = [r for r in caplog.records if "denied" in r.getMessage()]
    assert [r.levelno for r in denied] == [logging.INFO]
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]

    caplog.clear()
    broken = AllowListAuthorizer(FileBlobStore(tmp_path / "missing"), settings)
    with caplog.at_level(logging.INFO, logger="services.auth_service"):
        assert broken.is_allowed("+573106059758") is False
    errors = [
        r for r in caplog.records
        if r.name == "services.auth_service" and r.levelno == logging.ERROR
    ]
    assert len(errors) == 1
    assert "backing store unavailable" in errors[0].getMessage()
    assert not [r for r in caplog.records if "denied" in r.getMessage()]


def test_logs_never_carry_full_phone_number(authorizer, caplog):
    """Test numbers are masked in authorization logs."""
    with caplog.at_level(logging.INFO, logger="services.auth_service"):
        authorizer.is_allowed("+573000000000")
    assert "3000000000" not in caplog.text
    assert "0000" in caplog.text


def test_check_session_does_not_trim_token(service):
    """Test a token is looked up exactly as presented."""
    token = service.login("+573106059758").session_token
    with pytest.raises(InvalidSessionError):
        service.check_session(f" {token} ")
    assert service.check_session(token).phone_number == "3106059758"
