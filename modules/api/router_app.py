"""
Wires queries, services, controllers and middlewares into a Router and
registers the public routes under the API prefix.
"""

import logging
import time

from cookies import CookieManager, FlaskCookieStorage
from extensions import db
from modules.tasks.controller import TaskController
from modules.tasks.queries import TaskQueries
from modules.tasks.services import (
    AddTaskService,
    BulkDeleteTaskService,
    BulkMarkDoneTaskService,
    DeleteTaskService,
    GetTasksService,
    MarkDoneTaskService,
    UpdateTaskService,
)
from modules.users.controller import UserController
from modules.users.queries import UserQueries
from modules.users.services import (
    DeleteUserService,
    GetUserService,
    RefreshService,
    SessionTokens,
    SigninService,
    SignoutAllService,
    SignoutService,
    SignupService,
    UpdateUserService,
)
from modules.users.tokens import DEFAULT_REFRESH_TTL, RefreshTokenQueries, RefreshTokenService
from security import JwtService

from .errors import INTERNAL_ERROR_MESSAGE
from .middlewares import AuthMiddleware, DebugMiddleware
from .request import Request
from .responder import JsonResponder
from .router import Router

logger = logging.getLogger(__name__)

USER_ROUTES = [
    ("POST", "/users/signup", "signup", False),
    ("POST", "/users/signin", "signin", False),
    ("POST", "/users/signout", "signout", False),
    ("POST", "/users/signout_all", "signout_all", True),
    ("POST", "/users/refresh", "refresh", False),
    ("GET", "/users/me", "get_user", True),
    ("PUT", "/users/me", "update_user", True),
    ("PATCH", "/users/me", "update_user", True),
    ("DELETE", "/users/me", "delete_user", True),
]

TASK_ROUTES = [
    ("POST", "/tasks", "add_task", True),
    ("GET", "/tasks", "get_tasks", True),
    ("PATCH", "/tasks/bulk/done", "bulk_mark_done", True),
    ("DELETE", "/tasks/bulk", "bulk_delete", True),
    ("PATCH", "/tasks/:id", "update_task", True),
    ("PUT", "/tasks/:id", "update_task", True),
    ("PATCH", "/tasks/:id/done", "mark_done_task", True),
    ("POST", "/tasks/:id/done", "mark_done_task", True),
    ("DELETE", "/tasks/:id", "delete_task", True),
]


class RouterApp:
    def __init__(
        self,
        router: Router,
        session,
        jwt: JwtService,
        cookie_manager: CookieManager,
        api_prefix: str = "/v1",
        refresh_token_ttl: int = DEFAULT_REFRESH_TTL,
        max_sessions: int = 2,
        tasks_per_page: int = 10,
        user_controller: UserController | None = None,
        task_controller: TaskController | None = None,
        auth_middleware: AuthMiddleware | None = None,
        clock=time.time,
    ):
        self.router = router
        self.jwt = jwt
        self.cookie_manager = cookie_manager
        self.api_prefix = "/" + api_prefix.strip("/") if api_prefix.strip("/") else ""
        self.auth_middleware = auth_middleware or AuthMiddleware(cookie_manager, jwt)

        user_queries = UserQueries(session)
        task_queries = TaskQueries(session)
        self.refresh_tokens = RefreshTokenService(RefreshTokenQueries(session), jwt, max_sessions, clock)
        session_tokens = SessionTokens(jwt, self.refresh_tokens, cookie_manager, refresh_token_ttl, clock)

        self.user_controller = user_controller or UserController(
            signup=SignupService(user_queries, session_tokens),
            signin=SigninService(user_queries, session_tokens),
            signout=SignoutService(cookie_manager),
            signout_all=SignoutAllService(self.refresh_tokens, session_tokens),
            refresh=RefreshService(self.refresh_tokens, cookie_manager, session_tokens),
            get_user=GetUserService(user_queries),
            update_user=UpdateUserService(user_queries),
            delete_user=DeleteUserService(user_queries, self.refresh_tokens, session_tokens),
        )
        self.task_controller = task_controller or TaskController(
            add=AddTaskService(task_queries),
            get_tasks=GetTasksService(task_queries, tasks_per_page),
            update=UpdateTaskService(task_queries),
            mark_done=MarkDoneTaskService(task_queries),
            delete=DeleteTaskService(task_queries),
            bulk_delete=BulkDeleteTaskService(task_queries),
            bulk_mark_done=BulkMarkDoneTaskService(task_queries),
        )

        self._register_middlewares()
        self._register_routes()

    def _register_middlewares(self) -> None:
        def refresh_jwt(req: Request) -> None:
            try:
                self.auth_middleware.refresh_jwt(req)
            except Exception as exc:  # an unreadable session is treated as anonymous
                logger.error("JWT refresh failed: %s", exc)
                req.auth = None

        self.router.add_middleware(refresh_jwt)

    def _require_auth(self, req: Request) -> None:
        try:
            self.auth_middleware.require_auth(req)
        except Exception as exc:
            logger.warning("Auth failed for %s %s: %s", req.method, req.path, exc)
            raise
        logger.info("Auth passed for %s %s", req.method, req.path)

    def _register_routes(self) -> None:
        self._register_batch(USER_ROUTES, self.user_controller)
        self._register_batch(TASK_ROUTES, self.task_controller)

    def _register_batch(self, routes, controller) -> None:
        for method, path, handler_name, needs_auth in routes:
            full_path = self.api_prefix + path
            handler = getattr(controller, handler_name)
            middlewares = [self._require_auth] if needs_auth else []
            self.router.register(method, full_path, self._wrap(full_path, controller, handler_name, handler), middlewares)

    @staticmethod
    def _wrap(full_path, controller, handler_name, handler):
        def route(req: Request) -> JsonResponder:
            if req.json_error is not None:
                logger.warning("Invalid JSON body in %s %s: %s", req.method, req.path, req.json_error)
            logger.info("Route called: %s -> %s.%s", full_path, type(controller).__name__, handler_name)
            try:
                return handler(req)
            except Exception as exc:
                logger.error("Exception in route %s: %s", full_path, exc)
                raise

        return route

    def dispatch(self, req: Request) -> JsonResponder:
        try:
            return self.router.dispatch(req)
        except Exception:
            logger.exception("Unhandled exception during dispatch")
            return JsonResponder.error(INTERNAL_ERROR_MESSAGE, http_status=500)


def build_router_app(app, cookie_storage=None) -> RouterApp:
    """Build the RouterApp from the Flask app's config."""
    cfg = app.config
    storage = cookie_storage or FlaskCookieStorage(cfg["COOKIE_SECURE"], cfg["COOKIE_SAMESITE"])
    jwt = JwtService(
        cfg.get("JWT_SECRET"),
        cfg.get("JWT_ALGORITHM", "HS256"),
        cfg.get("ACCESS_TOKEN_TTL", 3600),
        cfg.get("JWT_REFRESH_THRESHOLD", 600),
    )
    router = Router()
    if cfg.get("APP_DEBUG"):
        router.add_middleware(DebugMiddleware())

    return RouterApp(
        router,
        db.session,
        jwt,
        CookieManager(storage),
        api_prefix=cfg.get("API_PREFIX", "/v1"),
        refresh_token_ttl=cfg.get("REFRESH_TOKEN_TTL", DEFAULT_REFRESH_TTL),
        max_sessions=cfg.get("MAX_SESSIONS", 2),
        tasks_per_page=cfg.get("TASKS_PER_PAGE", 10),
    )
