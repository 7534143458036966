"""Notifier that writes to the log."""

import logging

logger = logging.getLogger(__name__)


class LogNotifier:
    """Implements Notifier protocol by logging at INFO."""

    def notify(self, title: str, body: str) -> None:
        logger.info(f"{title} {body}")
