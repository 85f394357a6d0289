from trackcoach import main
from trackcoach.exceptions import (
    ConflictError,
    InviteUnavailableError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)


def test_field_is_folded_into_validation_code():
    assert ValidationError("bad").error_code == "VALIDATION_ERROR"
    err = ValidationError("bad type", field="type")
    assert err.status_code == 422
    assert err.error_code == "VALIDATION_ERROR_TYPE"
    assert err.detail == "bad type"


def test_not_found_names_resource():
    err = NotFoundError("Student", 7)
    assert err.status_code == 404
    assert err.detail == "Student not found: 7"


def test_unauthorized_asks_for_bearer_token():
    err = UnauthorizedError()
    assert err.status_code == 401
    assert err.detail == "Could not validate credentials"
    assert err.headers == {"WWW-Authenticate": "Bearer"}


def test_conflict_code_can_be_overridden():
    assert ConflictError("taken").error_code == "CONFLICT"
    err = ConflictError("taken", error_code="INVITE_ALREADY_CLAIMED")
    assert err.status_code == 409
    assert err.error_code == "INVITE_ALREADY_CLAIMED"
    # the override stays on the instance
    assert ConflictError.error_code == "CONFLICT"


def test_invite_unavailable_defaults():
    err = InviteUnavailableError()
    assert isinstance(err, ConflictError)
    assert err.status_code == 409
    assert err.error_code == "INVITE_UNAVAILABLE"
    assert err.detail == "Invalid, expired, or already used invite code"


def test_run_starts_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(main.uvicorn, "run", lambda app, **kw: calls.append((app, kw)))
    main.run()
    assert calls == [("trackcoach.main:app", {"host": "0.0.0.0", "port": 8000})]
