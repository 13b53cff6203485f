"""
Random password generation under a character-class policy
"""

import secrets

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()

UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
LOWERCASE = "abcdefghijklmnopqrstuvwxyz"
DIGITS = "0123456789"
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"
AMBIGUOUS = frozenset("0OIl")

MAX_PASSWORD_LENGTH = 512


class ConfigurationError(ValueError):
    """Raised when a policy leaves no characters to draw from"""
    pass


class PasswordPolicy(BaseModel):
    """
    Character-class policy for generated passwords
    """
    length: int = Field(default=16, ge=1, le=MAX_PASSWORD_LENGTH)
    uppercase: bool = True
    lowercase: bool = True
    numbers: bool = True
    symbols: bool = True
    exclude_similar: bool = False


def build_charset(policy: PasswordPolicy) -> str:
    """
    Build the candidate character set for a policy.

    Classes are concatenated in a fixed order (upper, lower, digits,
    symbols) and de-duplicated; ambiguous glyphs are removed when the
    policy asks for it.

    Args:
        policy: Password policy

    Returns:
        Candidate characters, possibly empty
    """
    classes = (
        (policy.uppercase, UPPERCASE),
        (policy.lowercase, LOWERCASE),
        (policy.numbers, DIGITS),
        (policy.symbols, SYMBOLS),
    )
    charset = "".join(chars for enabled, chars in classes if enabled)
    if policy.exclude_similar:
        charset = "".join(c for c in charset if c not in AMBIGUOUS)
    return "".join(dict.fromkeys(charset))


class PasswordGenerator:
    """
    Generates passwords with each character drawn uniformly from the
    policy's character set using the operating system CSPRNG.
    """

    def generate(self, policy: PasswordPolicy) -> str:
        """
        Generate a password.

        Args:
            policy: Password policy

        Returns:
            Password of exactly policy.length characters

        Raises:
            ConfigurationError: If no character class remains after exclusions
        """
        charset = build_charset(policy)
        if not charset:
            raise ConfigurationError(
                "at least one character class must remain after exclusions"
            )

        # randbelow rejects out-of-range draws, so there is no modulo bias
        size = len(charset)
        password = "".join(charset[secrets.randbelow(size)] for _ in range(policy.length))

        log.debug("password.generated", length=policy.length, charset_size=size)
        return password
