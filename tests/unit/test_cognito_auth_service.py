from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from myumc.db import schemas
from myumc.db.repositories import users as user_repo
from myumc.services.cognito_auth_service import CognitoAuthService, CognitoSettings
from myumc.services.errors import InvalidOperationError


def _client_error(code, message="boom", operation="Operation"):
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


@pytest.fixture
def settings(monkeypatch):
    monkeypatch.setenv("COGNITO_USER_POOL_ID", "us-east-1_pool")
    monkeypatch.setenv("COGNITO_CLIENT_ID", "client-123")
    monkeypatch.setenv("AWS_REGION", "us-east-1")
    return CognitoSettings()


@pytest.fixture
def cognito(db_session, settings):
    client = MagicMock()
    return CognitoAuthService(db_session, client=client, settings=settings), client


def test_settings_validation(monkeypatch):
    monkeypatch.delenv("COGNITO_USER_POOL_ID", raising=False)
    monkeypatch.setenv("COGNITO_CLIENT_ID", "client-123")
    with pytest.raises(ValueError, match="COGNITO_USER_POOL_ID"):
        CognitoSettings().validate()


def test_issuer(settings):
    assert settings.issuer == "https://cognito-idp.us-east-1.amazonaws.com/us-east-1_pool"


class TestLogin:
    def test_success_updates_last_login(self, cognito, user_factory, db_session):
        service, client = cognito
        user = user_factory(email="ruth@example.com")
        client.admin_initiate_auth.return_value = {
            "AuthenticationResult": {"AccessToken": "at", "RefreshToken": "rt", "ExpiresIn": 3600},
        }
        result = service.login("ruth@example.com", "pw")
        assert result.success
        assert (result.access_token, result.refresh_token) == ("at", "rt")
        kwargs = client.admin_initiate_auth.call_args.kwargs
        assert kwargs["AuthFlow"] == "ADMIN_NO_SRP_AUTH"
        assert kwargs["AuthParameters"] == {"USERNAME": "ruth@example.com", "PASSWORD": "pw"}
        db_session.expire_all()
        assert user_repo.get_user(db_session, user.id).last_login_at is not None

    @pytest.mark.parametrize("code,message", [
        ("NotAuthorizedException", "Invalid credentials"),
        ("UserNotFoundException", "User not found"),
    ])
    def test_known_errors(self, cognito, code, message):
        service, client = cognito
        client.admin_initiate_auth.side_effect = _client_error(code)
        result = service.login("ruth@example.com", "pw")
        assert not result.success
        assert result.message == message

    def test_other_errors_carry_provider_message(self, cognito):
        service, client = cognito
        client.admin_initiate_auth.side_effect = _client_error("TooManyRequestsException", "Slow down")
        assert service.login("ruth@example.com", "pw").message == "Login failed: Slow down"

    def test_challenge_without_result(self, cognito):
        service, client = cognito
        client.admin_initiate_auth.return_value = {"ChallengeName": "NEW_PASSWORD_REQUIRED"}
        assert service.login("ruth@example.com", "pw").message == "Login failed"


class TestRegistration:
    def _request(self, **overrides):
        data = dict(email="naomi@example.com", password="long-enough-1", first_name="Naomi", last_name="Banda")
        data.update(overrides)
        return schemas.RegisterRequest(**data)

    def test_creates_inactive_local_mirror(self, cognito, db_session):
        service, client = cognito
        client.sign_up.return_value = {"UserSub": "sub-1"}
        result = service.register(self._request(phone_number="+263771000000"))
        assert result.success
        assert "confirmation code" in result.message
        names = [a["Name"] for a in client.sign_up.call_args.kwargs["UserAttributes"]]
        assert names == ["email", "given_name", "family_name", "phone_number", "custom:user_type"]

        user = user_repo.get_user_by_email(db_session, "naomi@example.com")
        assert user.external_subject == "sub-1"
        assert user.auth_provider == "cognito"
        assert user.is_active is False

    def test_existing_username(self, cognito, db_session):
        service, client = cognito
        client.sign_up.side_effect = _client_error("UsernameExistsException")
        result = service.register(self._request())
        assert result.message == "Email already registered"
        assert user_repo.get_user_by_email(db_session, "naomi@example.com") is None

    def test_weak_password(self, cognito):
        service, client = cognito
        client.sign_up.side_effect = _client_error("InvalidPasswordException")
        assert service.register(self._request()).message == "Password does not meet requirements"

    def test_confirm_activates_user(self, cognito, user_factory, db_session):
        service, client = cognito
        user = user_factory(email="naomi@example.com", is_active=False)
        result = service.confirm_registration("naomi@example.com", "123456")
        assert result.success
        db_session.expire_all()
        assert user_repo.get_user(db_session, user.id).is_active is True

    def test_confirm_wrong_code(self, cognito):
        service, client = cognito
        client.confirm_sign_up.side_effect = _client_error("CodeMismatchException")
        assert service.confirm_registration("naomi@example.com", "000000").message == "Invalid confirmation code"


class TestPasswordsAndSessions:
    def test_forgot_and_reset(self, cognito):
        service, client = cognito
        assert service.forgot_password("a@example.com").success
        client.forgot_password.side_effect = _client_error("UserNotFoundException")
        assert service.forgot_password("a@example.com").message == "User not found"

        client.confirm_forgot_password.side_effect = _client_error("CodeMismatchException")
        assert service.reset_password("a@example.com", "1", "new-password-1").message == "Invalid reset code"

    def test_change_password_requires_access_token(self, cognito, user_factory):
        service, client = cognito
        user = user_factory()
        assert not service.change_password(user, "old", "new-password-1").success
        client.change_password.side_effect = _client_error("NotAuthorizedException")
        result = service.change_password(user, "old", "new-password-1", access_token="at")
        assert result.message == "Current password is incorrect"

    def test_refresh_keeps_refresh_token(self, cognito):
        service, client = cognito
        client.admin_initiate_auth.return_value = {"AuthenticationResult": {"AccessToken": "at2", "ExpiresIn": 60}}
        result = service.refresh("original-refresh")
        assert result.success
        assert result.access_token == "at2"
        assert result.refresh_token == "original-refresh"

        client.admin_initiate_auth.side_effect = _client_error("NotAuthorizedException")
        assert service.refresh("original-refresh").message == "Invalid refresh token"

    def test_sign_out_failure_raises(self, cognito, user_factory):
        service, client = cognito
        user = user_factory()
        service.sign_out(user)
        client.admin_user_global_sign_out.assert_called_once()

        client.admin_user_global_sign_out.side_effect = _client_error("NotAuthorizedException", "Revoked")
        with pytest.raises(InvalidOperationError, match="Revoked"):
            service.sign_out(user)

    def test_update_profile_syncs_attributes(self, cognito, user_factory):
        service, client = cognito
        user = user_factory()
        updated = service.update_profile(user.id, schemas.UserProfileUpdate(first_name="Chipo", preferred_language="sn"))
        assert updated.first_name == "Chipo"
        attributes = client.admin_update_user_attributes.call_args.kwargs["UserAttributes"]
        assert attributes == [{"Name": "given_name", "Value": "Chipo"}]


def test_token_from_unknown_key_is_rejected(cognito, monkeypatch):
    service, _client = cognito
    monkeypatch.setattr(service, "_signing_keys", lambda: [])
    monkeypatch.setattr("myumc.services.cognito_auth_service.jwt.get_unverified_header", lambda token: {"kid": "k1"})
    assert service.decode_access_token("header.payload.sig") is None
    assert service.authenticate_token("header.payload.sig") is None
