# ============================================================================
# NOTIFICATION SERVICE
# ============================================================================
# STATUS: Service - outbound notification seam
# PURPOSE: Notifier interface and best-effort fan-out to farm users
# EXPORTS: Notifier, LoggingNotifier, notify_users, farm_recipients
# DEPENDENCIES: util_logger
# ============================================================================
"""
Notification Service.

Delivery (in-app inbox, email) is an external collaborator; this module
only defines the interface and the fan-out rules:

    - recipients are de-duplicated and empty ids dropped
    - a delivery failure is logged and never reaches the caller
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from util_logger import LoggerFactory, ComponentType
from core.models import Farm

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "NotificationService")


class Notifier(ABC):
    """Outbound notification backend."""

    @abstractmethod
    def notify(
        self,
        recipients: List[str],
        message: str,
        url: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        ...


class LoggingNotifier(Notifier):
    """Default backend: writes each notification to the service log."""

    def notify(
        self,
        recipients: List[str],
        message: str,
        url: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        for recipient in recipients:
            logger.info(
                f"Notification for {recipient}: {message}",
                extra={'custom_dimensions': {'recipient': recipient, 'url': url, **(metadata or {})}}
            )


def farm_recipients(farm: Farm, exclude: Optional[str] = None) -> List[str]:
    """Owner, collaborators and members of a farm, minus `exclude`."""
    candidates = [farm.owner]
    candidates.extend(c.user_id for c in farm.collaborators or [])
    candidates.extend(m.id for m in farm.users or [])
    return [r for r in _unique(candidates) if r != exclude]


def _unique(recipients: Iterable[Optional[str]]) -> List[str]:
    seen = []
    for recipient in recipients:
        if recipient and recipient not in seen:
            seen.append(recipient)
    return seen


def notify_users(
    notifier: Notifier,
    recipients: Iterable[Optional[str]],
    message: str,
    url: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> int:
    """
    Fire-and-forget notification.

    Returns:
        Number of distinct recipients handed to the notifier (0 on failure)
    """
    unique = _unique(recipients)
    if not unique:
        return 0

    try:
        notifier.notify(unique, message, url=url, metadata=metadata)
    except Exception as e:
        logger.error(
            f"Failed to notify {len(unique)} recipient(s): {e}",
            exc_info=True,
            extra={'custom_dimensions': {'recipients': unique, **(metadata or {})}}
        )
        return 0
    return len(unique)
