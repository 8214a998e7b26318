"""Port interfaces for audit persistence and alerting."""

from abc import ABC, abstractmethod

from .models import AuditLogEntry


class AuditLogStorePort(ABC):
    """Append-only sink for audit entries."""

    @abstractmethod
    async def append(self, entry: AuditLogEntry) -> None:
        """Persist one entry.

        Raises:
            Exception: Any persistence failure; the audit logger catches it
        """
        pass


class CriticalAlertPort(ABC):
    """Out-of-band notification channel for high-risk audit entries."""

    @abstractmethod
    async def send_alert(self, entry: AuditLogEntry) -> None:
        pass
