"""Chorely Server Configuration."""

import secrets
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    server_name: str = "Chorely Server"
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False

    # Paths
    data_dir: Path = Path.home() / "chorely" / "data"

    # Database
    db_url: str = ""  # defaults to sqlite under data_dir
    db_timeout_seconds: float = 5.0

    # Session credential (JWT cookie)
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    session_expire_minutes: int = 60 * 24 * 365
    session_cookie_name: str = "chorely_session"

    # Identity forwarded by the authentication proxy. Trusted as-is, so the
    # proxy must strip these headers from client requests.
    identity_header: str = "X-Authenticated-User"
    identity_name_header: str = "X-Authenticated-Name"

    # Invite codes
    invite_code_length: int = 8
    invite_code_max_attempts: int = 5

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = {"env_prefix": "CHORELY_"}

    @property
    def database_url(self) -> str:
        return self.db_url or f"sqlite:///{self.data_dir / 'chorely.db'}"

    def ensure_dirs(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def ensure_secrets(self) -> None:
        """Generate the JWT secret if not set, persist it so sessions survive restarts."""
        secrets_file = self.data_dir / ".secrets"
        saved = {}
        if secrets_file.exists():
            for line in secrets_file.read_text().strip().splitlines():
                if "=" in line:
                    k, v = line.split("=", 1)
                    saved[k.strip()] = v.strip()

        if not self.jwt_secret:
            self.jwt_secret = saved.get("jwt_secret", "") or secrets.token_urlsafe(32)

        secrets_file.write_text(f"jwt_secret={self.jwt_secret}\n")


settings = Settings()
settings.ensure_dirs()
settings.ensure_secrets()
