"""Correlation ids carried through a request.

Two ids are tracked per task context:
- request_id: one per HTTP request (X-Request-ID header or generated)
- audit_session: the checkout attempt's audit session id, bound once the
  attempt's OrderAuditLogger exists so every log line of the attempt can be
  matched to its audit rows
"""

import uuid
from contextvars import ContextVar, Token
from typing import Optional

NO_REQUEST_ID = "no-request-id"

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
audit_session_var: ContextVar[Optional[str]] = ContextVar("audit_session", default=None)


def new_request_id() -> str:
    return uuid.uuid4().hex


def bind_request_id(request_id: str) -> Token:
    """Bind the request id; pass the token to ``request_id_var.reset`` when done."""
    return request_id_var.set(request_id)


def current_request_id() -> str:
    return request_id_var.get() or NO_REQUEST_ID


def bind_audit_session(session_id: str) -> Token:
    return audit_session_var.set(session_id)


def current_audit_session() -> Optional[str]:
    return audit_session_var.get()
