"""FastAPI dependency wiring.

Builds request-scoped collaborators: the composite validator over SQL
adapters, one OrderAuditLogger per checkout attempt and the checkout
service.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .audit.alerts import build_alert_sink
from .audit.service import OrderAuditLogger, client_info_from_request
from .checkout.service import CheckoutService
from .config import Settings, get_settings
from .database import get_db, get_session_factory
from .domain.validation.constraints import ConstraintValidator
from .domain.validation.engine import OrderValidationEngine
from .infrastructure.repositories.audit_log_repository import SqlAuditLogStore
from .infrastructure.repositories.catalog_repository import (
    SqlAddressDirectory,
    SqlDiscountValidator,
    SqlProductCatalog,
)
from .observability.correlation import bind_audit_session


def get_order_validator(db: AsyncSession = Depends(get_db)) -> OrderValidationEngine:
    """Composite validator backed by the request's session."""
    return OrderValidationEngine(
        ConstraintValidator(
            catalog=SqlProductCatalog(db),
            addresses=SqlAddressDirectory(db),
            discounts=SqlDiscountValidator(db),
        )
    )


def get_audit_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for audit writes (separate from the request session)."""
    return get_session_factory()


async def get_audit_logger(
    request: Request,
    settings: Settings = Depends(get_settings),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_audit_session_factory),
) -> OrderAuditLogger:
    """A fresh audit logger (new session id) for this checkout attempt.

    Entries are written through their own sessions, not the request's. The
    session id is bound to the log context for the rest of the request.
    """
    audit = OrderAuditLogger(
        store=SqlAuditLogStore(session_factory),
        alerts=build_alert_sink(settings),
        request_context=client_info_from_request(request),
    )
    bind_audit_session(audit.session_id)
    return audit


def get_checkout_service(
    db: AsyncSession = Depends(get_db),
    validator: OrderValidationEngine = Depends(get_order_validator),
    audit: OrderAuditLogger = Depends(get_audit_logger),
    settings: Settings = Depends(get_settings),
) -> CheckoutService:
    return CheckoutService(session=db, validator=validator, audit=audit, settings=settings)
