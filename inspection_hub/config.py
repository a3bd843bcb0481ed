import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _resolve_store_base_url() -> str:
    base_url = os.getenv("STORE_BASE_URL")
    if base_url:
        return base_url.rstrip("/")

    environment = os.getenv("ENVIRONMENT", "").strip().lower()
    if environment in {"development", "test"}:
        return "http://localhost:8400"

    raise ValueError(
        "STORE_BASE_URL is not set. Set STORE_BASE_URL for non-development "
        "environments or set ENVIRONMENT=development for local defaults."
    )


@dataclass(frozen=True)
class Settings:
    store_base_url: str = _resolve_store_base_url()
    store_app_id: str = os.getenv("STORE_APP_ID", "")
    store_api_key: str = os.getenv("STORE_API_KEY", "")
    store_timeout_seconds: float = float(os.getenv("STORE_TIMEOUT_SECONDS", "30"))
    store_max_connections: int = int(os.getenv("STORE_MAX_CONNECTIONS", "20"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_format: str = os.getenv(
        "LOG_FORMAT", "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    # Document uploads
    max_upload_size_bytes: int = int(
        os.getenv("MAX_UPLOAD_SIZE_BYTES", str(25 * 1024 * 1024))
    )  # 25MB
    allowed_document_types: str = os.getenv(
        "ALLOWED_DOCUMENT_TYPES",
        "application/pdf,image/jpeg,image/png,"
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document,"
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )

    # Branding
    brand_name: str = os.getenv("BRAND_NAME", "Inspection Hub")


settings = Settings()
