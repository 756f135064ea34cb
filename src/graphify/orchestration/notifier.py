"""Delivery of user-facing notices raised by workflow transitions."""

from typing import Protocol

from graphify.core.enums import NoticeLevel
from graphify.core.models import Notice
from graphify.infra.logging import get_logger

logger = get_logger(__name__)


class Notifier(Protocol):
    """Receives notices meant for the user."""

    def notify(self, notice: Notice) -> None:
        """Show a notice to the user."""
        ...


class LoggingNotifier:
    """Notifier that writes notices to the structured log."""

    def notify(self, notice: Notice) -> None:
        """Log the notice at a level matching its severity."""
        fields = {"code": notice.code, "hint": notice.hint}
        if notice.level is NoticeLevel.ERROR:
            logger.error(notice.message, **fields)
        else:
            logger.warning(notice.message, **fields)
