import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent / ".env")

PROJECT_ROOT = Path(__file__).resolve().parent.parent

PAYPAL_BASE_URLS = {
    "sandbox": "https://api-m.sandbox.paypal.com",
    "live": "https://api-m.paypal.com",
}


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _get_list(name: str, fallback: str = "") -> List[str]:
    raw_value = os.getenv(name, fallback)
    if not raw_value:
        return []
    return [item.strip() for item in raw_value.split(",") if item.strip()]


def _get_bool(name: str, fallback: bool) -> bool:
    raw_value = os.getenv(name)
    if raw_value is None or raw_value.strip() == "":
        return fallback
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_environment(name: str) -> str:
    value = os.getenv(name, "sandbox").strip().lower()
    if value not in PAYPAL_BASE_URLS:
        raise RuntimeError(
            f"{name} must be one of {', '.join(PAYPAL_BASE_URLS)}, got {value!r}"
        )
    return value


@dataclass(frozen=True)
class Settings:
    paypal_client_id: str = _require_env("PAYPAL_CLIENT_ID")
    paypal_client_secret: str = _require_env("PAYPAL_CLIENT_SECRET")
    paypal_environment: str = _get_environment("PAYPAL_ENVIRONMENT")
    paypal_timeout_seconds: float = float(os.getenv("PAYPAL_TIMEOUT_SECONDS", "30"))
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8080"))
    currency: str = os.getenv("CHECKOUT_CURRENCY", "GBP").upper()
    shipping_options_file: str | None = os.getenv("SHIPPING_OPTIONS_FILE")
    static_dir: Path = Path(os.getenv("STATIC_DIR", str(PROJECT_ROOT / "public")))
    expose_processor_errors: bool = _get_bool("EXPOSE_PROCESSOR_ERRORS", True)
    classify_processor_errors: bool = _get_bool("CLASSIFY_PROCESSOR_ERRORS", False)
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    allowed_origins: List[str] = field(
        default_factory=lambda: _get_list("ALLOWED_ORIGINS", "*")
    )

    @property
    def paypal_base_url(self) -> str:
        return PAYPAL_BASE_URLS[self.paypal_environment]


settings = Settings()
