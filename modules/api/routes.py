# modules/api/routes.py
# Flask is only the transport here: every URL lands in one view that hands a
# Request to the RouterApp and writes back whatever responder it returns.

from flask import current_app, make_response, request

from .middlewares import CorsMiddleware
from .request import Request

from . import bp

METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@bp.route("/", defaults={"path": ""}, methods=METHODS)
@bp.route("/<path:path>", methods=METHODS)
def dispatch(path: str):
    if request.method == "OPTIONS":
        # CORS preflight
        return make_response("", 200)

    router_app = current_app.extensions["router_app"]
    responder = router_app.dispatch(Request.from_flask(request))
    return responder.to_response()


@bp.after_app_request
def finalize(response):
    storage = current_app.extensions.get("cookie_storage")
    if storage is not None:
        storage.apply(response)
    cors = CorsMiddleware(current_app.config.get("CORS_ALLOWED_ORIGINS"))
    return cors.apply(response, request.headers.get("Origin"))
