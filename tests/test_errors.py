from __future__ import annotations

from core.domain.errors import (
    AuthenticationError,
    CleanerError,
    ConfigurationError,
    DeletionError,
    ErrCode,
    RemoteQueryError,
    UnsupportedKindError,
    UserNotFoundError,
)


def test_every_error_code_belongs_to_an_error_type():
    raised = {
        ConfigurationError().code,
        AuthenticationError().code,
        UserNotFoundError().code,
        RemoteQueryError().code,
        UnsupportedKindError("Trailer").code,
        DeletionError().code,
    }
    declared = {value for name, value in vars(ErrCode).items() if name.isupper()}

    assert raised == declared


def test_error_str_is_the_message():
    exc = UnsupportedKindError("Trailer", details={"item_id": "t1"})

    assert isinstance(exc, CleanerError)
    assert str(exc) == "Unsupported item type: Trailer"
    assert exc.kind == "Trailer"
    assert exc.details == {"item_id": "t1"}
