from __future__ import annotations

from .request_id import RequestIdMiddleware, account_ctx_var, bind_account, request_id_ctx_var

__all__ = [
    "RequestIdMiddleware",
    "account_ctx_var",
    "bind_account",
    "request_id_ctx_var",
]
