from ctfpilot.contracts.exceptions import (
    AuthenticationError,
    ChallengeLoadError,
    ChallengeValidationError,
    ConfigError,
    CtfPilotError,
    DuplicateIdentityError,
    ProviderError,
    ReconcileError,
    ReconcileInvariantError,
    StateError,
)


def test_exception_hierarchy() -> None:
    assert issubclass(ConfigError, CtfPilotError)
    assert issubclass(ChallengeLoadError, CtfPilotError)
    assert issubclass(ChallengeValidationError, CtfPilotError)
    assert issubclass(StateError, CtfPilotError)
    assert issubclass(ProviderError, CtfPilotError)
    assert issubclass(AuthenticationError, ProviderError)
    assert issubclass(ReconcileError, CtfPilotError)
    assert issubclass(DuplicateIdentityError, ReconcileError)
    assert issubclass(ReconcileInvariantError, ReconcileError)


def test_provider_error_exposes_status_code() -> None:
    err = ProviderError("rejected", status_code=400)

    assert err.status_code == 400
    assert ProviderError("network").status_code is None


def test_challenge_validation_error_lists_every_problem() -> None:
    err = ChallengeValidationError(["name is empty", "flag #1 is empty"])

    assert err.errors == ["name is empty", "flag #1 is empty"]
    assert "  - name is empty" in str(err)
    assert "  - flag #1 is empty" in str(err)


def test_duplicate_identity_error_fields() -> None:
    err = DuplicateIdentityError("flags", ["4", "7"])

    assert err.kind == "flags"
    assert err.identities == ["4", "7"]
    assert str(err) == "duplicate flags identities in desired collection: 4, 7"
