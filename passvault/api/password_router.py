"""
API Router for password generation
"""

from fastapi import APIRouter, Depends, Query

from .schemas import GeneratedPasswordResponse
from ..dependencies import get_metrics, get_password_generator
from ..metrics import Metrics
from ..services.crypto import PasswordGenerator, PasswordPolicy
from ..services.crypto.password_generator import MAX_PASSWORD_LENGTH

router = APIRouter(tags=["passwords"])


@router.get(
    "/generate-password",
    response_model=GeneratedPasswordResponse,
    summary="Generate a random password",
)
async def generate_password(
    length: int = Query(16, ge=1, le=MAX_PASSWORD_LENGTH),
    uppercase: bool = True,
    lowercase: bool = True,
    numbers: bool = True,
    symbols: bool = True,
    exclude_similar: bool = Query(False, alias="excludeSimilar"),
    generator: PasswordGenerator = Depends(get_password_generator),
    metrics: Metrics = Depends(get_metrics),
) -> GeneratedPasswordResponse:
    """
    Generate a password

    Character classes default to on; an empty selection returns 400.
    """
    policy = PasswordPolicy(
        length=length,
        uppercase=uppercase,
        lowercase=lowercase,
        numbers=numbers,
        symbols=symbols,
        exclude_similar=exclude_similar,
    )
    password = generator.generate(policy)
    metrics.passwords_generated_total.inc()
    return GeneratedPasswordResponse(password=password)
