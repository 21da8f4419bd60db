"""HTTP routes for signup, login and account lookups.

Handlers are plain ``def`` functions so FastAPI runs them on its thread pool;
bcrypt hashing then never blocks the event loop.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..crud.accounts import authenticate, get_account_by_username, list_accounts, register_account
from ..db.session import get_db
from ..middlewares import bind_account
from ..schemas.account import AccountSummary, LoginRequest, ProfileOut, RosterOut, SignupRequest

router = APIRouter(tags=["accounts"])


@router.post("/signup", response_model=AccountSummary, status_code=201)
def api_signup(payload: SignupRequest, db: Session = Depends(get_db)):
    account = register_account(
        db,
        email=payload.email,
        username=payload.username,
        password=payload.password,
        country_code=payload.country_code,
    )
    bind_account(account.id)
    return account


@router.post("/login", response_model=AccountSummary)
def api_login(payload: LoginRequest, db: Session = Depends(get_db)):
    account = authenticate(db, identity=payload.identity, password=payload.password)
    bind_account(account.id)
    return account


@router.get("/user/{username}", response_model=ProfileOut)
def api_get_user(username: str, db: Session = Depends(get_db)):
    return get_account_by_username(db, username)


@router.get("/users", response_model=RosterOut)
def api_list_users(db: Session = Depends(get_db)):
    return {"ok": True, "data": list_accounts(db)}
