"""Persistence of the single pending nonce per account identity."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session
from sqlalchemy.sql.dml import Insert

from wallet_auth.db.time import as_utc, utcnow
from wallet_auth.models import User

logger = logging.getLogger(__name__)

_DIALECT_INSERTS: dict[str, Callable[..., Insert]] = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class NonceNotFoundError(LookupError):
    """No nonce is currently associated with the identity."""


class NonceExpiredError(NonceNotFoundError):
    """The stored nonce is older than the configured maximum age."""


@dataclass(frozen=True)
class Nonce:
    """A challenge value bound to one identity."""

    value: str
    issued_at: datetime

    def __str__(self) -> str:
        return self.value


def generate_nonce() -> str:
    """Return a fresh unpredictable nonce in UUID textual form."""
    return str(uuid.uuid4())


class NonceStore:
    """Reads and writes the identity -> nonce association.

    Args:
        db: Session bound to the persistence store.
        max_age: Optional maximum nonce age; older nonces are treated as absent.
        clock: Source of the current UTC time.
    """

    def __init__(
        self,
        db: Session,
        *,
        max_age: timedelta | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._db = db
        self._max_age = max_age
        self._clock = clock

    def _insert(self) -> Callable[..., Insert]:
        dialect = self._db.get_bind().dialect.name
        try:
            return _DIALECT_INSERTS[dialect]
        except KeyError as err:
            raise RuntimeError(f"Nonce upsert is not supported on {dialect}") from err

    def issue(self, identity: str) -> Nonce:
        """Generate a nonce for ``identity``, replacing any previous one."""
        nonce = Nonce(value=generate_nonce(), issued_at=self._clock())
        insert = self._insert()
        stmt = insert(User).values(
            user_id=identity,
            nonce=nonce.value,
            nonce_issued_at=nonce.issued_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[User.user_id],
            set_={
                "nonce": stmt.excluded.nonce,
                "nonce_issued_at": stmt.excluded.nonce_issued_at,
            },
        )
        self._db.execute(stmt)
        self._db.commit()
        logger.debug("Issued nonce for %s", identity)
        return nonce

    def current(self, identity: str) -> Nonce:
        """Return the nonce currently associated with ``identity``.

        Raises:
            NonceNotFoundError: If no nonce is pending for ``identity``.
            NonceExpiredError: If the pending nonce is older than ``max_age``.
        """
        row = self._db.execute(
            select(User.nonce, User.nonce_issued_at).where(User.user_id == identity)
        ).one_or_none()
        if row is None or row.nonce is None:
            raise NonceNotFoundError(identity)

        issued_at = as_utc(row.nonce_issued_at) if row.nonce_issued_at else None
        if self._max_age is not None:
            if issued_at is None or self._clock() - issued_at > self._max_age:
                raise NonceExpiredError(identity)

        return Nonce(value=row.nonce, issued_at=issued_at or self._clock())

    def consume(self, identity: str, nonce: Nonce | str) -> bool:
        """Clear ``nonce`` if it is still the one associated with ``identity``.

        Returns True only for the caller whose update cleared the nonce.
        """
        result = self._db.execute(
            update(User)
            .where(User.user_id == identity, User.nonce == str(nonce))
            .values(nonce=None, nonce_issued_at=None)
        )
        self._db.commit()
        consumed = result.rowcount == 1
        if not consumed:
            logger.info("Nonce for %s was already consumed or replaced", identity)
        return consumed
