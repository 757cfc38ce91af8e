"""Simulated e-mail notifications for newly scheduled events.

Nothing is delivered. The notifier writes the would-be dispatch to the log
and returns the acknowledgement shown to the leader.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationReceipt:
    """Acknowledgement of one simulated dispatch."""

    event_title: str
    label: str
    recipient_count: int
    church_wide: bool
    message: str
    sent_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_title": self.event_title,
            "label": self.label,
            "recipient_count": self.recipient_count,
            "church_wide": self.church_wide,
            "message": self.message,
            "sent_at": self.sent_at.isoformat(),
        }


class Notifier:
    """Logs simulated e-mails and hands back a receipt for each."""

    def send(
        self,
        *,
        recipient_count: int,
        label: str,
        event_title: str,
        church_wide: bool = False,
    ) -> NotificationReceipt:
        """Log a dispatch to *recipient_count* people described by *label*."""
        if church_wide:
            logger.info(
                '[SIMULAÇÃO DE EMAIL] Enviando email para TODOS os %d usuários sobre: "%s"',
                recipient_count,
                event_title,
            )
            message = (
                "Simulação: Disparo de e-mail realizado para toda a igreja "
                f'sobre o evento "{event_title}"!'
            )
        else:
            logger.info(
                '[SIMULAÇÃO DE EMAIL] Enviando email para %d membros do setor %s sobre: "%s"',
                recipient_count,
                label,
                event_title,
            )
            message = (
                f"Simulação: Disparo de e-mail realizado para {recipient_count} membros "
                f'de {label} sobre o evento "{event_title}"!'
            )

        return NotificationReceipt(
            event_title=event_title,
            label=label,
            recipient_count=recipient_count,
            church_wide=church_wide,
            message=message,
            sent_at=datetime.now(UTC),
        )
