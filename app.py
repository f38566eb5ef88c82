import logging

from flask import Flask
from dotenv import load_dotenv

load_dotenv()

from config import Config  # noqa: E402  (load_dotenv needs to run first)
from extensions import db  # noqa: E402  (load_dotenv needs to run first)

LOG_FORMAT = "[%(asctime)s][%(levelname)s] %(name)s: %(message)s"


def configure_logging(app: Flask) -> None:
    level = app.config.get("LOG_LEVEL") or ("INFO" if app.config.get("APP_DEBUG") else "WARNING")
    root = logging.getLogger()
    # create_app() runs once per test; keep a single handler
    if not any(h.get_name() == "todo_api" for h in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name("todo_api")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level.upper())


def create_app(test_config: dict | None = None) -> Flask:
    """Application factory for the to-do API."""

    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    configure_logging(app)

    # init extensions
    db.init_app(app)

    # blueprints
    from modules.api import bp as api_bp
    from modules.api.router_app import build_router_app
    from cookies import FlaskCookieStorage

    app.register_blueprint(api_bp)

    cookie_storage = FlaskCookieStorage(app.config["COOKIE_SECURE"], app.config["COOKIE_SAMESITE"])
    app.extensions["cookie_storage"] = cookie_storage
    app.extensions["router_app"] = build_router_app(app, cookie_storage)

    # DB
    with app.app_context():
        # models must be imported before create_all()
        import models  # noqa: F401

        db.create_all()

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=app.config.get("APP_DEBUG", False))
