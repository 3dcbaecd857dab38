# family100/config.py
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _default_accounts() -> Dict[str, Tuple[str, str]]:
    """username -> (plain password, role). Passwords can be overridden per account."""
    accounts = {
        "admin": (os.getenv("ADMIN_PASSWORD", "admin123"), "admin"),
        "host": (os.getenv("HOST_PASSWORD", "host123"), "host"),
    }
    for n in range(1, 5):
        accounts[f"player{n}"] = (os.getenv(f"PLAYER{n}_PASSWORD", "player123"), "player")
    return accounts


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    accounts: Dict[str, Tuple[str, str]] = field(default_factory=_default_accounts)
    questions_file: Optional[str] = None
    public_dir: Path = BASE_DIR / "public"
    cors_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"]
    )
    session_ttl_seconds: int = 24 * 60 * 60
    session_cookie_secure: bool = False
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Build settings from the environment (and `.env`, already loaded above)."""
    origins = os.getenv("CORS_ORIGINS")
    kwargs = {}
    if origins:
        kwargs["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]
    if os.getenv("PUBLIC_DIR"):
        kwargs["public_dir"] = Path(os.getenv("PUBLIC_DIR"))

    return Settings(
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        questions_file=os.getenv("QUESTIONS_FILE") or None,
        session_ttl_seconds=int(os.getenv("SESSION_TTL_SECONDS", str(24 * 60 * 60))),
        session_cookie_secure=_get_bool("SESSION_COOKIE_SECURE"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        **kwargs,
    )
