import os


def _env_bool(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev_secret_key')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URI', 'sqlite:///todo.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT / sessions
    JWT_SECRET = os.getenv('JWT_SECRET', 'dev_jwt_secret_change_me_in_production')
    JWT_ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')
    ACCESS_TOKEN_TTL = int(os.getenv('ACCESS_TOKEN_TTL', '3600'))
    REFRESH_TOKEN_TTL = int(os.getenv('REFRESH_TOKEN_TTL', '604800'))
    JWT_REFRESH_THRESHOLD = int(os.getenv('JWT_REFRESH_THRESHOLD', '600'))
    MAX_SESSIONS = int(os.getenv('MAX_SESSIONS', '2'))

    # cookies
    COOKIE_SECURE = _env_bool('COOKIE_SECURE', True)
    COOKIE_SAMESITE = os.getenv('COOKIE_SAMESITE', 'Strict')

    # API
    API_PREFIX = os.getenv('API_PREFIX', '/v1')
    TASKS_PER_PAGE = int(os.getenv('TASKS_PER_PAGE', '10'))
    CORS_ALLOWED_ORIGINS = [o.strip() for o in os.getenv('CORS_ALLOWED_ORIGINS', '').split(',') if o.strip()]

    APP_DEBUG = _env_bool('APP_DEBUG', True)
    LOG_LEVEL = os.getenv('LOG_LEVEL', '')
