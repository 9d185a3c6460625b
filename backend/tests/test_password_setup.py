import pytest
from datetime import timedelta

from punchclock.models.enums import Role
from punchclock.services.auth_service import authenticate
from punchclock.services.password_setup_service import PasswordSetupService
from punchclock.services.token_cleanup import TokenCleanupService
from punchclock.utils.errors import InvalidCredentialsError, NotFoundError, ValidationError
from conftest import FixedClock, RecordingSender, add_account, at, run


@pytest.fixture
def clock():
    return FixedClock(at(2025, 3, 3, 9))


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def service(store, sender, clock):
    run(add_account(store, "jane@example.com", Role.EMPLOYEE))
    return PasswordSetupService(store, sender=sender, clock=clock)


def test_initiate_emails_a_link(service, sender):
    token = run(service.initiate("jane@example.com"))
    assert token
    assert len(sender.sent) == 1
    to, _, body = sender.sent[0]
    assert to == "jane@example.com"
    assert f"set-password?token={token}" in body


def test_initiate_unknown_email(service):
    with pytest.raises(NotFoundError):
        run(service.initiate("nobody@example.com"))


def test_initiate_survives_email_failure(store, clock):
    run(add_account(store, "jane@example.com", Role.EMPLOYEE))
    service = PasswordSetupService(store, sender=RecordingSender(fail=True), clock=clock)
    token = run(service.initiate("jane@example.com"))
    assert run(store.find_credential_by_reset_token(token)) is not None


def test_set_password_redeems_token_once(store, service):
    token = run(service.initiate("jane@example.com"))
    run(service.set_password(token, "brand-new-password"))

    assert run(authenticate(store, "jane@example.com", "brand-new-password")).email == "jane@example.com"
    with pytest.raises(InvalidCredentialsError):
        run(authenticate(store, "jane@example.com", "password123"))

    with pytest.raises(ValidationError) as exc:
        run(service.set_password(token, "another-password"))
    assert exc.value.message == "Invalid or expired token."


def test_set_password_with_unknown_token(service):
    with pytest.raises(ValidationError):
        run(service.set_password("does-not-exist", "brand-new-password"))
    with pytest.raises(ValidationError):
        run(service.set_password("", "brand-new-password"))


def test_expired_token_is_rejected_and_cleared(store, service, clock):
    token = run(service.initiate("jane@example.com"))
    clock.now += timedelta(hours=24, minutes=1)

    with pytest.raises(ValidationError):
        run(service.set_password(token, "brand-new-password"))
    assert run(store.find_credential_by_reset_token(token)) is None


def test_cleanup_clears_only_expired_tokens(store, service, clock):
    expired = run(service.initiate("jane@example.com"))
    run(add_account(store, "john@example.com", Role.EMPLOYEE))
    clock.now += timedelta(hours=25)
    fresh = run(service.initiate("john@example.com"))

    cleared = run(store.clear_expired_reset_tokens(clock.now))
    assert cleared == 1
    assert run(store.find_credential_by_reset_token(expired)) is None
    assert run(store.find_credential_by_reset_token(fresh)) is not None


def test_cleanup_service_run_once(store, service):
    run(service.initiate("jane@example.com"))
    # tokens issued in 2025 are long expired by the real clock
    assert run(TokenCleanupService().run_once()) == 1
