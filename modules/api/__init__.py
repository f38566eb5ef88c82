"""JSON API package: router, middlewares and the Flask transport."""

from flask import Blueprint

bp = Blueprint("api", __name__)

from . import routes  # noqa: E402  pylint: disable=wrong-import-position

__all__ = ["bp", "routes"]
