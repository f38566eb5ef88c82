"""Account use cases: signup, signin, sessions and profile management."""

import logging
import time
import uuid

from werkzeug.security import check_password_hash, generate_password_hash

from modules.api.errors import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from validators import RequestValidator

from .tokens import DEFAULT_REFRESH_TTL

logger = logging.getLogger(__name__)

MAX_USERNAME_LENGTH = 255
INVALID_CREDENTIALS = "Invalid username or password."
DUPLICATE_USER = "Username or email already exists."


def public_user(user: dict) -> dict:
    return {k: v for k, v in user.items() if k != "password"}


class SessionTokens:
    """Issues the access/refresh cookie pair for a signed-in user."""

    def __init__(self, jwt, refresh_tokens, cookie_manager, refresh_ttl: int = DEFAULT_REFRESH_TTL, clock=time.time):
        self.jwt = jwt
        self.refresh_tokens = refresh_tokens
        self.cookie_manager = cookie_manager
        self.refresh_ttl = refresh_ttl
        self.clock = clock

    def issue(self, user_id: str) -> None:
        now = int(self.clock())
        access = self.jwt.create({"id": user_id}, now)
        self.cookie_manager.set_access_token(access, now + self.jwt.expire)

        refresh = self.refresh_tokens.create(user_id, self.refresh_ttl)
        self.cookie_manager.set_refresh_token(refresh, now + self.refresh_ttl)

    def clear(self) -> None:
        self.cookie_manager.clear_access_token()
        self.cookie_manager.clear_refresh_token()


class SignupService:
    def __init__(self, user_queries, session_tokens: SessionTokens):
        self.user_queries = user_queries
        self.session_tokens = session_tokens

    def execute(self, req) -> dict:
        username = RequestValidator.get_string(req, "username", "Username is required.")
        email = RequestValidator.get_email(req, "email", "Valid email is required.")
        password = RequestValidator.get_string(req, "password", "Password is required.", clean=False)
        if len(username) > MAX_USERNAME_LENGTH:
            raise ValidationError("Username is too long.")

        exists = self.user_queries.check_user_exists(username, email)
        RequestValidator.ensure_success(exists, "check user existence", require_data=False, ignore_changes=True)
        if exists.data:
            raise ConflictError(DUPLICATE_USER)

        result = self.user_queries.create_user(str(uuid.uuid4()), username, email, generate_password_hash(password))
        if result.conflict:
            # lost a race against a concurrent signup with the same name/email
            raise ConflictError(DUPLICATE_USER)
        RequestValidator.ensure_success(result, "sign up")

        user = result.data
        self.session_tokens.issue(user["id"])
        logger.info("User %s signed up", user["id"])
        return public_user(user)


class SigninService:
    def __init__(self, user_queries, session_tokens: SessionTokens):
        self.user_queries = user_queries
        self.session_tokens = session_tokens

    def execute(self, req) -> None:
        username = RequestValidator.get_string(req, "username", "Username is required.")
        password = RequestValidator.get_string(req, "password", "Password is required.", clean=False)

        result = self.user_queries.get_user_by_name(username)
        RequestValidator.ensure_success(result, "fetch user", require_data=False, ignore_changes=True)
        user = result.data
        if not user or not check_password_hash(user["password"], password):
            raise UnauthorizedError(INVALID_CREDENTIALS)

        self.session_tokens.issue(user["id"])
        logger.info("User %s signed in", user["id"])


class SignoutService:
    def __init__(self, cookie_manager):
        self.cookie_manager = cookie_manager

    def execute(self, req=None) -> None:
        self.cookie_manager.clear_access_token()


class SignoutAllService:
    """Ends every session of the caller: all refresh tokens go, both cookies are cleared."""

    def __init__(self, refresh_tokens, session_tokens: SessionTokens):
        self.refresh_tokens = refresh_tokens
        self.session_tokens = session_tokens

    def execute(self, req) -> None:
        user_id = RequestValidator.get_auth_user_id(req)
        self.refresh_tokens.revoke_all_for_user(user_id)
        self.session_tokens.clear()


class RefreshService:
    def __init__(self, refresh_tokens, cookie_manager, session_tokens: SessionTokens):
        self.refresh_tokens = refresh_tokens
        self.cookie_manager = cookie_manager
        self.session_tokens = session_tokens

    def execute(self, req=None) -> None:
        token = self.cookie_manager.get_refresh_token()
        if not token:
            raise UnauthorizedError("Refresh token missing")

        user_id = self.refresh_tokens.verify(token)
        # single use: the presented token is gone before a new one is issued
        self.refresh_tokens.revoke(token)
        self.session_tokens.issue(user_id)


class GetUserService:
    def __init__(self, user_queries):
        self.user_queries = user_queries

    def execute(self, req) -> dict:
        user_id = RequestValidator.get_auth_user_id(req)
        result = self.user_queries.get_user_by_id(user_id)
        RequestValidator.ensure_success(result, "fetch user", require_data=False, ignore_changes=True)
        if not result.data:
            raise NotFoundError("User not found.")
        return {"username": result.data["username"], "email": result.data["email"]}


class UpdateUserService:
    def __init__(self, user_queries):
        self.user_queries = user_queries

    def execute(self, req) -> dict:
        user_id = RequestValidator.get_auth_user_id(req)
        username = RequestValidator.get_string(req, "username", "Username is required.")
        email = RequestValidator.get_email(req, "email", "Valid email is required.")
        if len(username) > MAX_USERNAME_LENGTH:
            raise ValidationError("Username is too long.")

        exists = self.user_queries.check_user_exists(username, email, exclude_id=user_id)
        RequestValidator.ensure_success(exists, "check user existence", require_data=False, ignore_changes=True)
        if exists.data:
            raise ConflictError(DUPLICATE_USER)

        result = self.user_queries.update_user(user_id, username, email)
        if result.conflict:
            raise ConflictError(DUPLICATE_USER)
        RequestValidator.ensure_success(result, "update user")
        return {"username": result.data["username"], "email": result.data["email"]}


class DeleteUserService:
    def __init__(self, user_queries, refresh_tokens, session_tokens: SessionTokens):
        self.user_queries = user_queries
        self.refresh_tokens = refresh_tokens
        self.session_tokens = session_tokens

    def execute(self, req) -> None:
        user_id = RequestValidator.get_auth_user_id(req)
        self.refresh_tokens.revoke_all_for_user(user_id)

        result = self.user_queries.delete_user(user_id)
        RequestValidator.ensure_success(result, "delete user", require_data=False)

        self.session_tokens.clear()
        logger.info("User %s deleted", user_id)
