"""
Session token models and login schemas
"""

from pydantic import BaseModel, Field, StrictInt, model_validator


class TokenPayload(BaseModel):
    """
    Claims carried by a session token (unix seconds)
    """
    iat: StrictInt = Field(..., description="Issued at")
    exp: StrictInt = Field(..., description="Expires at")

    @model_validator(mode="after")
    def validate_window(self) -> "TokenPayload":
        if self.exp <= self.iat:
            raise ValueError("exp must be later than iat")
        return self

    def is_expired(self, now: int) -> bool:
        """Check whether the token has expired at the given unix time"""
        return self.exp <= now


class LoginRequest(BaseModel):
    """
    Master password login request
    """
    password: str = Field(..., description="Master password")


class LoginResponse(BaseModel):
    """
    Response from a successful login
    """
    token: str
    expiresAt: int = Field(..., description="Expiry as unix epoch milliseconds")
