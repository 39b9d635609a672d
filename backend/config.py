import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent / ".env")


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
    if raw_value is None or not raw_value.strip():
        return fallback
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    supabase_url: str = _require_env("SUPABASE_URL")
    supabase_service_role_key: str = _require_env("SUPABASE_SERVICE_ROLE_KEY")
    allowed_origins: List[str] = field(
        default_factory=lambda: _get_list("ALLOWED_ORIGINS", "*")
    )
    default_stock_quantity: int = int(os.getenv("DEFAULT_STOCK_QUANTITY", "1000"))
    strict_status_transitions: bool = _get_bool("STRICT_STATUS_TRANSITIONS", True)
    allow_unlinked_restock: bool = _get_bool("ALLOW_UNLINKED_RESTOCK", True)
    steadfast_base_url: str = os.getenv(
        "STEADFAST_BASE_URL", "https://portal.packzy.com/api/v1"
    )
    steadfast_api_key: str | None = os.getenv("STEADFAST_API_KEY")
    steadfast_secret_key: str | None = os.getenv("STEADFAST_SECRET_KEY")
    courier_timeout_seconds: int = int(os.getenv("COURIER_TIMEOUT_SECONDS", "15"))
    address_classifier_url: str = os.getenv(
        "ADDRESS_CLASSIFIER_URL", "https://api.openai.com/v1/chat/completions"
    )
    address_classifier_api_key: str | None = os.getenv("ADDRESS_CLASSIFIER_API_KEY")
    address_classifier_model: str = os.getenv("ADDRESS_CLASSIFIER_MODEL", "gpt-4o-mini")
    address_classifier_timeout_seconds: int = int(
        os.getenv("ADDRESS_CLASSIFIER_TIMEOUT_SECONDS", "20")
    )


settings = Settings()
