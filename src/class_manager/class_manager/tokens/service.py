from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from ..core.constants import DEFAULT_TOKEN_MAX_ATTEMPTS, TOKEN_ALPHABET, TOKEN_LENGTH, UQ_STUDENT_TOKEN
from ..core.exceptions import DuplicateKeyError, InvalidTokenError, NotFoundError, TokenIssuanceError
from ..students.repository import StudentRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class TokenGenerator:
    """Random opaque tokens: 16 symbols over a 32-symbol alphabet (80 bits)."""

    alphabet: str = TOKEN_ALPHABET
    length: int = TOKEN_LENGTH

    def __call__(self) -> str:
        return "".join(secrets.choice(self.alphabet) for _ in range(self.length))

    def is_well_formed(self, value: str) -> bool:
        return len(value) == self.length and all(ch in self.alphabet for ch in value)


class IdentityTokenService:
    """Issue, verify and rotate the QR/login token bound to a student.

    Tokens are random strings resolved through the unique ``qr_token`` index,
    so uniqueness is enforced by the store and a collision simply retries.
    """

    def __init__(
        self,
        students: StudentRepository,
        *,
        generator: Optional[TokenGenerator] = None,
        max_attempts: int = DEFAULT_TOKEN_MAX_ATTEMPTS,
    ):
        self._students = students
        self._generator = generator or TokenGenerator()
        self._max_attempts = max(1, int(max_attempts))

    def generate(self) -> str:
        return self._generator()

    def issue_with(self, write: Callable[[str], T]) -> T:
        """Call ``write(token)`` with fresh candidates until one is accepted.

        Only a duplicate on the token index is retried; any other error
        (duplicate phone, missing row, ...) propagates unchanged.
        """
        for attempt in range(1, self._max_attempts + 1):
            token = self._generator()
            try:
                return write(token)
            except DuplicateKeyError as e:
                if e.key != UQ_STUDENT_TOKEN:
                    raise
                logger.warning("QR token collision (attempt %d/%d)", attempt, self._max_attempts)

        logger.critical(
            "QR token issuance exhausted %d attempts; token space is too small for the student count",
            self._max_attempts,
        )
        raise TokenIssuanceError("Could not issue a unique QR token")

    def issue(self, student_id: int) -> str:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Student not found")
        if student.qr_token:
            return student.qr_token
        return self.rotate(student.student_id)

    def rotate(self, student_id: int) -> str:
        def _write(token: str) -> str:
            if not self._students.replace_token(int(student_id), token):
                raise NotFoundError("Student not found")
            return token

        token = self.issue_with(_write)
        logger.info("QR token rotated for student %s", student_id)
        return token

    def _normalize(self, token: object) -> Optional[str]:
        if not isinstance(token, str):
            return None
        # Printed codes may carry a scan link; the token is its last path segment.
        value = token.strip().rstrip("/").rsplit("/", 1)[-1].upper()
        if not self._generator.is_well_formed(value):
            return None
        return value

    def resolve(self, token: object):
        """Student bound to ``token``; malformed and unknown tokens fail alike."""
        value = self._normalize(token)
        student = self._students.get_by_token(value) if value else None
        if not student:
            raise InvalidTokenError()
        return student

    def verify(self, token: object) -> int:
        return self.resolve(token).student_id
