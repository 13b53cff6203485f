"""Master password login and bearer session authentication."""
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import structlog
from ..config import Settings
from ..dependencies import get_metrics, get_token_service
from ..metrics import Metrics
from ..services.crypto import AuthenticationError, TokenPayload, TokenService
from ..services.crypto.encoding import constant_time_equals

log = structlog.get_logger()

# Bearer scheme; missing or non-Bearer headers yield None instead of a FastAPI 403
bearer_scheme = HTTPBearer(auto_error=False)


def check_master_password(candidate: str, settings: Settings) -> bool:
    """
    Compare a login attempt against the configured master password.

    Args:
        candidate: Password supplied by the caller
        settings: Application settings

    Returns:
        True if the password matches; always False when none is configured
    """
    if not settings.MASTER_PASSWORD:
        return False
    return constant_time_equals(candidate, settings.MASTER_PASSWORD)


async def require_session(
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
    token_service: TokenService = Depends(get_token_service),
    metrics: Metrics = Depends(get_metrics),
) -> TokenPayload:
    """
    Dependency gating every record endpoint.

    Args:
        credentials: Parsed Authorization header, if any

    Returns:
        Verified session token payload

    Raises:
        AuthenticationError: If the header is missing or the token does not verify
    """
    if credentials is None:
        log.warning("auth.failed")
        metrics.auth_failures_total.inc()
        raise AuthenticationError()

    try:
        payload = token_service.verify(credentials.credentials)
    except AuthenticationError:
        log.warning("auth.failed")
        metrics.auth_failures_total.inc()
        raise

    log.debug("auth.success", exp=payload.exp)
    return payload
