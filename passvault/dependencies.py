"""Process-wide service instances built once from settings.

The signing secret and encryption key are read here and injected into
the services; nothing else reads them from configuration.
"""
import structlog
from .config import get_settings, Settings
from .metrics import Metrics
from .services.crypto import CipherService, PasswordGenerator, TokenService
from .services.record_service import RecordService, create_record_store

log = structlog.get_logger()

SERVICE_NAME = "passvault"
VERSION = "0.1.0"


def _require_secrets(settings: Settings) -> None:
    """
    Fail fast when security material is missing.

    Raises:
        RuntimeError: If JWT_SECRET or ENCRYPTION_KEY is not set
    """
    missing = [name for name in ("JWT_SECRET", "ENCRYPTION_KEY") if not getattr(settings, name)]
    if missing:
        raise RuntimeError(
            f"{', '.join(missing)} must be set. "
            "Generate an encryption key with CipherService.generate_key()"
        )
    if not settings.MASTER_PASSWORD:
        log.warning("config.master_password_missing", effect="all logins will be rejected")


settings = get_settings()
_require_secrets(settings)

metrics = Metrics(service_name=SERVICE_NAME, version=VERSION)

_token_service = TokenService(settings.JWT_SECRET)
_cipher_service = CipherService(settings.ENCRYPTION_KEY)
_password_generator = PasswordGenerator()
_record_service = RecordService(create_record_store(settings), _cipher_service, metrics=metrics)


def get_settings_dependency() -> Settings:
    return settings


def get_metrics() -> Metrics:
    return metrics


def get_token_service() -> TokenService:
    """Get the global token service instance"""
    return _token_service


def get_password_generator() -> PasswordGenerator:
    return _password_generator


def get_record_service() -> RecordService:
    """Get the global record service instance"""
    return _record_service
