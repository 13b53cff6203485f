"""
Tests for PasswordGenerator

Tests cover:
- Character set construction and ordering
- Length and class constraints
- Ambiguous glyph exclusion
- Empty policy rejection
- Uniformity of draws
"""

import string
from collections import Counter

import pytest
from pydantic import ValidationError

from passvault.services.crypto import ConfigurationError, PasswordGenerator, PasswordPolicy
from passvault.services.crypto.password_generator import (
    AMBIGUOUS,
    DIGITS,
    LOWERCASE,
    SYMBOLS,
    UPPERCASE,
    build_charset,
)

NO_CLASSES = dict(uppercase=False, lowercase=False, numbers=False, symbols=False)


class TestCharacterSet:
    """Test character set construction"""

    def test_all_classes_in_fixed_order(self):
        charset = build_charset(PasswordPolicy())
        assert charset == UPPERCASE + LOWERCASE + DIGITS + SYMBOLS

    def test_symbol_set(self):
        assert SYMBOLS == "!@#$%^&*()_+-=[]{}|;:,.<>?"

    def test_no_duplicates(self):
        charset = build_charset(PasswordPolicy())
        assert len(charset) == len(set(charset))

    def test_exclude_similar(self):
        """Test that 0, O, I and l are removed"""
        charset = build_charset(PasswordPolicy(exclude_similar=True))

        assert not set(charset) & AMBIGUOUS
        assert len(charset) == len(UPPERCASE + LOWERCASE + DIGITS + SYMBOLS) - 4

    def test_digits_only_excluding_similar(self):
        policy = PasswordPolicy(**{**NO_CLASSES, "numbers": True}, exclude_similar=True)
        assert build_charset(policy) == "123456789"

    def test_empty_when_all_disabled(self):
        assert build_charset(PasswordPolicy(**NO_CLASSES)) == ""


class TestGenerate:
    """Test password generation"""

    def test_default_policy(self):
        """Test length 16 with all classes enabled"""
        password = PasswordGenerator().generate(PasswordPolicy(length=16))
        allowed = set(UPPERCASE + LOWERCASE + DIGITS + SYMBOLS)

        assert len(password) == 16
        assert set(password) <= allowed

    def test_digits_only(self):
        """Test length 12 with only digits enabled"""
        policy = PasswordPolicy(**{**NO_CLASSES, "numbers": True}, length=12)
        password = PasswordGenerator().generate(policy)

        assert len(password) == 12
        assert password.isdigit()

    def test_lowercase_only(self):
        policy = PasswordPolicy(**{**NO_CLASSES, "lowercase": True}, length=40)
        password = PasswordGenerator().generate(policy)

        assert len(password) == 40
        assert set(password) <= set(string.ascii_lowercase)

    def test_exclude_similar_never_emits_ambiguous(self):
        generator = PasswordGenerator()
        policy = PasswordPolicy(length=200, exclude_similar=True)

        for _ in range(20):
            assert not set(generator.generate(policy)) & AMBIGUOUS

    @pytest.mark.parametrize("length", [1, 2, 7, 64, 512])
    def test_exact_length(self, length):
        assert len(PasswordGenerator().generate(PasswordPolicy(length=length))) == length

    def test_all_classes_disabled(self):
        """Test that an empty character set is a configuration error"""
        with pytest.raises(ConfigurationError, match="at least one character class"):
            PasswordGenerator().generate(PasswordPolicy(**NO_CLASSES))

    def test_all_disabled_with_exclusions(self):
        with pytest.raises(ConfigurationError):
            PasswordGenerator().generate(PasswordPolicy(**NO_CLASSES, exclude_similar=True))

    def test_passwords_differ(self):
        generator = PasswordGenerator()
        passwords = {generator.generate(PasswordPolicy(length=24)) for _ in range(50)}
        assert len(passwords) == 50

    @pytest.mark.parametrize("length", [0, -1, 513])
    def test_invalid_length_rejected(self, length):
        with pytest.raises(ValidationError):
            PasswordPolicy(length=length)


class TestUniformity:
    """Test that every allowed character is drawn with equal probability"""

    @pytest.mark.parametrize("classes,length", [
        # 9 characters: does not divide any power of two
        ({**NO_CLASSES, "numbers": True, "exclude_similar": True}, 504),
        # 62 characters
        ({**NO_CLASSES, "uppercase": True, "lowercase": True, "numbers": True}, 496),
    ])
    def test_frequencies_are_flat(self, classes, length):
        """Chi-square goodness-of-fit against the uniform distribution"""
        policy = PasswordPolicy(**classes, length=length)
        generator = PasswordGenerator()
        charset = build_charset(policy)
        counts = Counter()
        rounds = 40
        for _ in range(rounds):
            counts.update(generator.generate(policy))

        total = policy.length * rounds
        expected = total / len(charset)

        assert set(counts) == set(charset)
        chi_square = sum((counts[c] - expected) ** 2 / expected for c in charset)

        # Critical values at p ~ 1e-6: df=8 -> ~46, df=61 -> ~130
        limit = 46 if len(charset) == 9 else 130
        assert chi_square < limit
