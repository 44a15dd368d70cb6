"""
AWS Cognito identity provider.

Credentials live in the Cognito user pool; a local ``users`` row mirrors the
profile so church data can reference it. Cognito error codes are mapped to
user-facing failure messages instead of surfacing as exceptions.
"""
import logging
import os
import uuid
from datetime import timedelta
from typing import Optional, Dict, Any, List

import boto3
import requests
from botocore.exceptions import BotoCoreError, ClientError
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from myumc.db import models, schemas
from myumc.db.models import now_utc
from myumc.db.repositories import users as user_repo
from myumc.services.auth_service import AuthService
from myumc.services.errors import NotFoundError, InvalidOperationError
from myumc.utils.runtime import sanitize_for_log

logger = logging.getLogger(__name__)

# JWKS documents keyed by issuer URL
_JWKS_CACHE: Dict[str, List[Dict[str, Any]]] = {}


class CognitoSettings:
    """Cognito configuration from environment variables."""

    def __init__(self):
        self.user_pool_id = os.getenv("COGNITO_USER_POOL_ID", "")
        self.client_id = os.getenv("COGNITO_CLIENT_ID", "")
        self.region = os.getenv("AWS_REGION", "us-east-1")

    def validate(self) -> None:
        if not self.user_pool_id:
            raise ValueError("COGNITO_USER_POOL_ID is not configured")
        if not self.client_id:
            raise ValueError("COGNITO_CLIENT_ID is not configured")

    @property
    def issuer(self) -> str:
        return f"https://cognito-idp.{self.region}.amazonaws.com/{self.user_pool_id}"


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


def _error_message(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Message", str(exc))
    return str(exc)


def _failure(message: str) -> schemas.AuthResponse:
    return schemas.AuthResponse(success=False, message=message)


class CognitoAuthService(AuthService):
    """Authentication backed by a Cognito user pool."""

    provider = "cognito"

    def __init__(self, db: Session, client=None, settings: Optional[CognitoSettings] = None):
        self.db = db
        self.settings = settings or CognitoSettings()
        self.settings.validate()
        self.client = client or boto3.client("cognito-idp", region_name=self.settings.region)

    def _session_from(self, result: Dict[str, Any], message: str, refresh_token: Optional[str] = None) -> schemas.AuthResponse:
        return schemas.AuthResponse(
            success=True,
            message=message,
            access_token=result.get("AccessToken"),
            refresh_token=refresh_token or result.get("RefreshToken"),
            expires_at=now_utc() + timedelta(seconds=int(result.get("ExpiresIn", 3600))),
        )

    # Tokens

    def _signing_keys(self) -> List[Dict[str, Any]]:
        issuer = self.settings.issuer
        if issuer not in _JWKS_CACHE:
            response = requests.get(f"{issuer}/.well-known/jwks.json", timeout=5)
            response.raise_for_status()
            _JWKS_CACHE[issuer] = response.json().get("keys", [])
        return _JWKS_CACHE[issuer]

    def decode_access_token(self, token: str) -> Optional[Dict[str, Any]]:
        try:
            kid = jwt.get_unverified_header(token).get("kid")
            key = next((k for k in self._signing_keys() if k.get("kid") == kid), None)
            if key is None:
                return None
            claims = jwt.decode(
                token,
                key,
                algorithms=["RS256"],
                issuer=self.settings.issuer,
                options={"verify_aud": False},
            )
        except (JWTError, requests.RequestException):
            return None
        # Access tokens carry client_id, ID tokens carry aud
        if self.settings.client_id not in (claims.get("client_id"), claims.get("aud")):
            return None
        return claims

    def authenticate_token(self, token: str) -> Optional[models.User]:
        claims = self.decode_access_token(token)
        if not claims:
            return None
        user = user_repo.get_user_by_external_subject(self.db, claims.get("sub", ""))
        if user is None and claims.get("email"):
            user = user_repo.get_user_by_email(self.db, claims["email"])
        if user is None or not user.is_active:
            return None
        return user

    # Account lifecycle

    def login(self, email: str, password: str) -> schemas.AuthResponse:
        try:
            response = self.client.admin_initiate_auth(
                UserPoolId=self.settings.user_pool_id,
                ClientId=self.settings.client_id,
                AuthFlow="ADMIN_NO_SRP_AUTH",
                AuthParameters={"USERNAME": email, "PASSWORD": password},
            )
        except ClientError as exc:
            code = _error_code(exc)
            if code == "NotAuthorizedException":
                return _failure("Invalid credentials")
            if code == "UserNotFoundException":
                return _failure("User not found")
            logger.warning("Cognito login failed for %s: %s", sanitize_for_log(email), code)
            return _failure(f"Login failed: {_error_message(exc)}")
        except BotoCoreError as exc:
            logger.exception("Cognito unreachable during login")
            return _failure(f"Login failed: {_error_message(exc)}")

        result = response.get("AuthenticationResult")
        if not result:
            return _failure("Login failed")
        user = user_repo.get_user_by_email(self.db, email)
        if user is not None:
            user_repo.update_user(self.db, user, last_login_at=now_utc())
        return self._session_from(result, "Login successful")

    def register(self, request: schemas.RegisterRequest) -> schemas.AuthResponse:
        attributes = [
            {"Name": "email", "Value": request.email},
            {"Name": "given_name", "Value": request.first_name},
            {"Name": "family_name", "Value": request.last_name},
            {"Name": "custom:user_type", "Value": request.user_type.value},
        ]
        if request.phone_number:
            attributes.insert(3, {"Name": "phone_number", "Value": request.phone_number})
        try:
            response = self.client.sign_up(
                ClientId=self.settings.client_id,
                Username=request.email,
                Password=request.password,
                UserAttributes=attributes,
            )
        except ClientError as exc:
            code = _error_code(exc)
            if code == "UsernameExistsException":
                return _failure("Email already registered")
            if code == "InvalidPasswordException":
                return _failure("Password does not meet requirements")
            return _failure(f"Registration failed: {_error_message(exc)}")
        except BotoCoreError as exc:
            logger.exception("Cognito unreachable during registration")
            return _failure(f"Registration failed: {_error_message(exc)}")

        existing = user_repo.get_user_by_email(self.db, request.email)
        if existing is None:
            user_repo.create_user(
                self.db,
                email=request.email,
                first_name=request.first_name,
                last_name=request.last_name,
                phone_number=request.phone_number,
                user_type=request.user_type.value,
                organization_id=request.organization_id,
                auth_provider=self.provider,
                external_subject=response.get("UserSub"),
                is_active=False,
            )
        logger.info("Registered Cognito user %s", sanitize_for_log(request.email))
        return schemas.AuthResponse(
            success=True,
            message="Registration successful. Please check your email for confirmation code.",
        )

    def confirm_registration(self, email: str, code: str) -> schemas.AuthResponse:
        try:
            self.client.confirm_sign_up(
                ClientId=self.settings.client_id,
                Username=email,
                ConfirmationCode=code,
            )
        except ClientError as exc:
            if _error_code(exc) == "CodeMismatchException":
                return _failure("Invalid confirmation code")
            return _failure(f"Confirmation failed: {_error_message(exc)}")
        except BotoCoreError as exc:
            return _failure(f"Confirmation failed: {_error_message(exc)}")

        user = user_repo.get_user_by_email(self.db, email)
        if user is not None:
            user_repo.update_user(self.db, user, is_active=True)
        return schemas.AuthResponse(success=True, message="Registration confirmed successfully")

    def forgot_password(self, email: str) -> schemas.AuthResponse:
        try:
            self.client.forgot_password(ClientId=self.settings.client_id, Username=email)
        except ClientError as exc:
            if _error_code(exc) == "UserNotFoundException":
                return _failure("User not found")
            return _failure(f"Password reset request failed: {_error_message(exc)}")
        except BotoCoreError as exc:
            return _failure(f"Password reset request failed: {_error_message(exc)}")
        return schemas.AuthResponse(success=True, message="Password reset code sent to your email")

    def reset_password(self, email: str, code: str, new_password: str) -> schemas.AuthResponse:
        try:
            self.client.confirm_forgot_password(
                ClientId=self.settings.client_id,
                Username=email,
                ConfirmationCode=code,
                Password=new_password,
            )
        except ClientError as exc:
            code_name = _error_code(exc)
            if code_name == "CodeMismatchException":
                return _failure("Invalid reset code")
            if code_name == "InvalidPasswordException":
                return _failure("Password does not meet requirements")
            return _failure(f"Password reset failed: {_error_message(exc)}")
        except BotoCoreError as exc:
            return _failure(f"Password reset failed: {_error_message(exc)}")
        return schemas.AuthResponse(success=True, message="Password reset successful")

    def change_password(self, user: models.User, current_password: str, new_password: str, access_token: Optional[str] = None) -> schemas.AuthResponse:
        if not access_token:
            return _failure("An access token is required to change the password")
        try:
            self.client.change_password(
                PreviousPassword=current_password,
                ProposedPassword=new_password,
                AccessToken=access_token,
            )
        except ClientError as exc:
            code = _error_code(exc)
            if code == "NotAuthorizedException":
                return _failure("Current password is incorrect")
            if code == "InvalidPasswordException":
                return _failure("New password does not meet requirements")
            return _failure(f"Password change failed: {_error_message(exc)}")
        except BotoCoreError as exc:
            return _failure(f"Password change failed: {_error_message(exc)}")
        return schemas.AuthResponse(success=True, message="Password changed successfully")

    def refresh(self, refresh_token: str) -> schemas.AuthResponse:
        try:
            response = self.client.admin_initiate_auth(
                UserPoolId=self.settings.user_pool_id,
                ClientId=self.settings.client_id,
                AuthFlow="REFRESH_TOKEN_AUTH",
                AuthParameters={"REFRESH_TOKEN": refresh_token},
            )
        except ClientError as exc:
            if _error_code(exc) == "NotAuthorizedException":
                return _failure("Invalid refresh token")
            return _failure(f"Token refresh failed: {_error_message(exc)}")
        except BotoCoreError as exc:
            return _failure(f"Token refresh failed: {_error_message(exc)}")

        result = response.get("AuthenticationResult")
        if not result:
            return _failure("Token refresh failed")
        # Cognito does not rotate refresh tokens on REFRESH_TOKEN_AUTH
        return self._session_from(result, "Token refreshed successfully", refresh_token=refresh_token)

    def sign_out(self, user: models.User, access_token: Optional[str] = None) -> None:
        try:
            self.client.admin_user_global_sign_out(UserPoolId=self.settings.user_pool_id, Username=user.email)
        except ClientError as exc:
            raise InvalidOperationError(f"Sign out failed: {_error_message(exc)}")
        user_repo.clear_refresh_token(self.db, user)
        logger.info("Signed out Cognito user %s", user.id)

    # Profile

    def update_profile(self, user_id: uuid.UUID, profile: schemas.UserProfileUpdate) -> models.User:
        user = user_repo.get_user(self.db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        changes = profile.model_dump(exclude_unset=True, exclude_none=True)
        attribute_names = {"first_name": "given_name", "last_name": "family_name", "phone_number": "phone_number"}
        attributes = [
            {"Name": attribute_names[key], "Value": value}
            for key, value in changes.items()
            if key in attribute_names
        ]
        if attributes:
            try:
                self.client.admin_update_user_attributes(
                    UserPoolId=self.settings.user_pool_id,
                    Username=user.email,
                    UserAttributes=attributes,
                )
            except ClientError as exc:
                raise InvalidOperationError(f"Profile update failed: {_error_message(exc)}")
        return user_repo.update_user(self.db, user, **changes)
