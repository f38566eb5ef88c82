"""Access-token signing and refresh-token generation."""

import hashlib
import secrets
import time

import jwt

STANDARD_CLAIMS = ("iat", "nbf", "exp")


class JwtService:
    def __init__(self, secret: str | None, algorithm: str = "HS256", expire: int = 3600, refresh_threshold: int = 600):
        if not secret:
            raise RuntimeError("JWT_SECRET is not set")
        self.secret = secret
        self.algorithm = algorithm
        self.expire = expire
        self.refresh_threshold = refresh_threshold

    def create(self, claims: dict, now: int | None = None) -> str:
        """Sign ``claims`` together with iat/nbf/exp; ``now`` overrides the issue time."""
        now = int(time.time()) if now is None else int(now)
        payload = dict(claims)
        payload.update({"iat": now, "nbf": now, "exp": now + self.expire})
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_strict(self, token: str) -> dict:
        """Decode and validate; raises ``jwt.InvalidTokenError`` subclasses."""
        return jwt.decode(token, self.secret, algorithms=[self.algorithm])

    def verify(self, token: str | None) -> dict | None:
        if not token:
            return None
        try:
            return self.decode_strict(token)
        except jwt.InvalidTokenError:
            return None

    def should_refresh(self, payload: dict, now: int | None = None) -> bool:
        now = int(time.time()) if now is None else int(now)
        try:
            exp = int(payload.get("exp", 0))
        except (TypeError, ValueError):
            exp = 0
        return exp - now < self.refresh_threshold

    def refresh(self, payload: dict, now: int | None = None) -> str:
        claims = {k: v for k, v in payload.items() if k not in STANDARD_CLAIMS}
        return self.create(claims, now)

    @staticmethod
    def create_refresh_token() -> str:
        return secrets.token_hex(32)

    @staticmethod
    def hash_refresh_token(token: str) -> str:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()
