"""
API Router for master password login
"""

from fastapi import APIRouter, Depends, status
import structlog

from ..auth.session import check_master_password
from ..config import Settings
from ..dependencies import get_metrics, get_settings_dependency, get_token_service
from ..metrics import Metrics
from ..services.crypto import AuthenticationError, LoginRequest, LoginResponse, TokenService

log = structlog.get_logger()

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Log in with the master password",
    description="Exchange the master password for a session token"
)
async def login(
    request: LoginRequest,
    settings: Settings = Depends(get_settings_dependency),
    token_service: TokenService = Depends(get_token_service),
    metrics: Metrics = Depends(get_metrics),
) -> LoginResponse:
    """
    Log in

    - **password**: Master password

    Returns a bearer token and its expiry in epoch milliseconds.
    """
    if not check_master_password(request.password, settings):
        log.warning("login.failed")
        metrics.record_login(success=False)
        raise AuthenticationError()

    token, payload = token_service.issue_session(settings.SESSION_DURATION)
    metrics.record_login(success=True)
    log.info("login.succeeded", exp=payload.exp)
    return LoginResponse(token=token, expiresAt=payload.exp * 1000)
