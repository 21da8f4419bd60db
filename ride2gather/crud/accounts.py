"""Account directory: registration, credential checks and lookups.

Functions here take a SQLAlchemy ``Session`` and return ORM rows; shaping
the response is left to the schemas. Failures are raised as the
``ServiceError`` subclasses from ``core.errors``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import (
    ConflictFailure,
    CredentialFailure,
    NotFoundFailure,
    ServerFailure,
    ValidationFailure,
)
from ..core.security import MAX_PASSWORD_BYTES, hash_password, password_too_long, verify_password
from ..models.account import Account

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6
DUPLICATE_IDENTITY_MESSAGE = "email or username already exists"


def _utcnow() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _validate_registration(email, username, password) -> None:
    if not email or not username or not password:
        raise ValidationFailure("email, username, and password are required")
    if not all(isinstance(value, str) for value in (email, username, password)):
        raise ValidationFailure("email, username, and password must be strings")
    if len(username) < MIN_USERNAME_LENGTH:
        raise ValidationFailure(f"username must be at least {MIN_USERNAME_LENGTH} chars")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailure(f"password must be at least {MIN_PASSWORD_LENGTH} chars")
    if password_too_long(password):
        raise ValidationFailure(f"password must be at most {MAX_PASSWORD_BYTES} bytes")


def _storage_failure(db: Session, exc: SQLAlchemyError, **context) -> ServerFailure:
    db.rollback()
    logger.exception("account.storage_error", extra={"extra_data": context})
    return ServerFailure(str(exc))


def _find_by_identity(db: Session, email: str, username: str) -> Account | None:
    stmt = select(Account).where(or_(Account.email == email, Account.username == username)).limit(1)
    try:
        return db.execute(stmt).scalars().first()
    except SQLAlchemyError as exc:
        raise _storage_failure(db, exc, username=username) from exc


def get_account(db: Session, account_id: int) -> Account | None:
    try:
        return db.get(Account, account_id)
    except SQLAlchemyError as exc:
        raise _storage_failure(db, exc, account_id=account_id) from exc


def register_account(
    db: Session,
    *,
    email: str,
    username: str,
    password: str,
    country_code: str | None = None,
) -> Account:
    _validate_registration(email, username, password)
    if country_code is not None and not isinstance(country_code, str):
        raise ValidationFailure("country_code must be a string")

    if _find_by_identity(db, email, username) is not None:
        logger.info("account.register_conflict", extra={"extra_data": {"username": username}})
        raise ConflictFailure(DUPLICATE_IDENTITY_MESSAGE)

    try:
        password_hash = hash_password(password)
    except ValueError as exc:
        logger.exception("account.hash_error")
        raise ServerFailure(str(exc)) from exc

    now = _utcnow()
    account = Account(
        email=email,
        username=username,
        password_hash=password_hash,
        country_code=country_code or "",
        bio="",
        created_at=now,
        last_online=now,
    )
    db.add(account)
    try:
        db.commit()
    except IntegrityError as exc:
        # Another request registered the same identity between the check and
        # the insert; the unique constraints decide who wins.
        db.rollback()
        logger.info("account.register_conflict", extra={"extra_data": {"username": username, "race": True}})
        raise ConflictFailure(DUPLICATE_IDENTITY_MESSAGE) from exc
    except SQLAlchemyError as exc:
        raise _storage_failure(db, exc, username=username) from exc
    db.refresh(account)
    logger.info("account.registered", extra={"extra_data": {"account_id": account.id, "username": username}})
    return account


def authenticate(db: Session, *, identity: str, password: str) -> Account:
    """Check a password against the account matching an email or username.

    An unknown identity and a wrong password are reported differently
    (``NotFoundFailure`` vs ``CredentialFailure``). No token is issued.
    """
    if not identity or not password:
        raise ValidationFailure("username/email and password are required")
    if not isinstance(identity, str) or not isinstance(password, str):
        raise ValidationFailure("username/email and password must be strings")

    account = _find_by_identity(db, identity, identity)
    if account is None:
        raise NotFoundFailure("User not found")
    if not verify_password(password, account.password_hash):
        logger.info("account.login_failed", extra={"extra_data": {"account_id": account.id}})
        raise CredentialFailure("Invalid password")
    return account


def get_account_by_username(db: Session, username: str) -> Account:
    stmt = select(Account).where(Account.username == username)
    try:
        account = db.execute(stmt).scalars().first()
    except SQLAlchemyError as exc:
        raise _storage_failure(db, exc, username=username) from exc
    if account is None:
        raise NotFoundFailure("User not found")
    return account


def list_accounts(db: Session) -> list[Account]:
    stmt = select(Account).order_by(Account.username.asc())
    try:
        return list(db.execute(stmt).scalars().all())
    except SQLAlchemyError as exc:
        raise _storage_failure(db, exc) from exc
