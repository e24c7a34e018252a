"""Background poll loop that delivers due notification hints.

The notifier only uses the public store operations, so any number of
notifiers in any number of processes can run against the same table.
"""
from __future__ import annotations

import threading
from datetime import timedelta
from typing import Callable, Optional

from loguru import logger
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from hintstore.core import clock
from hintstore.core.config import settings
from hintstore.core.errors import ClaimLostError, NotFoundError
from hintstore.models.notification_hint import NotificationHint
from hintstore.services.notification_hint_service import (
    peek_next_notification_hint,
    pop_next_notification_hint,
    upsert_notification_hint,
)

HintHandler = Callable[[NotificationHint], None]


class HintNotifier:
    def __init__(
        self,
        engine: Engine,
        handler: HintHandler,
        idle_interval: Optional[timedelta] = None,
        retry_interval: Optional[timedelta] = None,
    ) -> None:
        self._engine = engine
        self._handler = handler
        if idle_interval is None:
            idle_interval = timedelta(seconds=settings.NOTIFIER_IDLE_SECONDS)
        self._idle_seconds = idle_interval.total_seconds()
        self._retry_interval = retry_interval or idle_interval
        self._wake = threading.Event()
        self._done = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._done.clear()
        self._thread = threading.Thread(target=self._loop, name='hint-notifier', daemon=True)
        self._thread.start()
        logger.info('hint_notifier.started', idle_seconds=self._idle_seconds)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._done.set()
        self._wake.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info('hint_notifier.stopped')

    def wake(self) -> None:
        """Re-check the earliest hint now, e.g. right after an upsert."""
        self._wake.set()

    def next_wait_seconds(self) -> float:
        try:
            with Session(self._engine) as session:
                hint = peek_next_notification_hint(session)
        except NotFoundError:
            return self._idle_seconds
        except SQLAlchemyError as exc:
            logger.error('hint_notifier.peek_failed', error=str(exc))
            return self._idle_seconds
        wait = (hint.notify_at - clock.get_millis()) / 1000
        return min(max(wait, 0.0), self._idle_seconds)

    def notify_due(self) -> int:
        """Claim and deliver every hint that is due now. Returns the count delivered.

        A hint whose handler raises is upserted again so it comes due after
        the retry interval. Delivery is at-least-once for handler failures.
        """
        delivered = 0
        while not self._done.is_set():
            now = clock.get_millis()
            try:
                with Session(self._engine) as session:
                    if peek_next_notification_hint(session).notify_at > now:
                        break
                    hint = pop_next_notification_hint(session)
            except NotFoundError:
                break
            except ClaimLostError:
                continue
            except SQLAlchemyError as exc:
                logger.error('hint_notifier.claim_failed', error=str(exc))
                break

            try:
                self._handler(hint)
            except Exception:
                logger.exception(
                    'hint_notifier.handler_failed',
                    block_id=hint.block_id,
                    workspace_id=hint.workspace_id,
                )
                self._reschedule(hint)
                continue
            delivered += 1
        return delivered

    def _reschedule(self, hint: NotificationHint) -> None:
        try:
            with Session(self._engine) as session:
                upsert_notification_hint(session, hint, self._retry_interval)
        except SQLAlchemyError as exc:
            logger.error(
                'hint_notifier.reschedule_failed',
                block_id=hint.block_id,
                workspace_id=hint.workspace_id,
                error=str(exc),
            )

    def _loop(self) -> None:
        while not self._done.is_set():
            count = self.notify_due()
            if count:
                logger.debug('hint_notifier.delivered', count=count)
            self._wake.wait(self.next_wait_seconds())
            self._wake.clear()
