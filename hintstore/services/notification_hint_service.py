"""Persistence for notification hints.

Every function runs against the caller's session and commits its own write.
There are no retries here; callers decide how to back off.
"""
from datetime import timedelta

from loguru import logger
from sqlalchemy import delete, insert, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from hintstore.core import clock
from hintstore.core.errors import ClaimLostError, NotFoundError
from hintstore.models.notification_hint import NotificationHint

RESOURCE = 'notification hint'


def _key_clause(workspace_id: str, block_id: str):
    return (NotificationHint.block_id == block_id) & (NotificationHint.workspace_id == workspace_id)


def _hint_values(hint: NotificationHint) -> dict:
    return {
        'block_type': hint.block_type,
        'block_id': hint.block_id,
        'workspace_id': hint.workspace_id,
        'create_at': hint.create_at,
        'notify_at': hint.notify_at,
    }


def upsert_notification_hint(
    session: Session,
    hint: NotificationHint,
    notification_freq: timedelta,
) -> NotificationHint:
    """Create the hint for ``hint``'s key, or push an existing one's due time forward.

    Both paths persist and return ``notify_at = now + notification_freq``.
    If the row is popped or deleted between the lookup and the update, the
    hint is inserted again as new.
    """
    hint.is_valid()

    try:
        existing = get_notification_hint(session, hint.workspace_id, hint.block_id)
    except NotFoundError:
        existing = None

    now = clock.get_millis()
    notify_at = now + int(notification_freq.total_seconds() * 1000)

    try:
        if existing is not None:
            record = existing.clone()
            record.notify_at = notify_at
            result = session.exec(
                update(NotificationHint)
                .where(_key_clause(record.workspace_id, record.block_id))
                .values(notify_at=notify_at)
            )
            if result.rowcount == 0:
                logger.debug(
                    'notification_hint.refresh_missed',
                    block_id=hint.block_id,
                    workspace_id=hint.workspace_id,
                )
                existing = None
        if existing is None:
            record = hint.clone()
            record.create_at = now
            record.notify_at = notify_at
            session.exec(insert(NotificationHint).values(**_hint_values(record)))
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error(
            'notification_hint.upsert_failed',
            block_id=hint.block_id,
            workspace_id=hint.workspace_id,
            error=str(exc),
        )
        raise
    return record


def get_notification_hint(session: Session, workspace_id: str, block_id: str) -> NotificationHint:
    try:
        record = session.exec(
            select(NotificationHint).where(_key_clause(workspace_id, block_id))
        ).first()
    except SQLAlchemyError as exc:
        logger.error(
            'notification_hint.fetch_failed',
            block_id=block_id,
            workspace_id=workspace_id,
            error=str(exc),
        )
        raise
    if record is None:
        raise NotFoundError(RESOURCE, block_id)
    return record


def delete_notification_hint(session: Session, workspace_id: str, block_id: str) -> None:
    """Delete one hint. Deleting a hint that does not exist is an error."""
    try:
        result = session.exec(delete(NotificationHint).where(_key_clause(workspace_id, block_id)))
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error(
            'notification_hint.delete_failed',
            block_id=block_id,
            workspace_id=workspace_id,
            error=str(exc),
        )
        raise
    if result.rowcount == 0:
        raise NotFoundError(RESOURCE, block_id)


def _select_next(session: Session) -> NotificationHint:
    try:
        record = session.exec(
            select(NotificationHint).order_by(NotificationHint.notify_at).limit(1)
        ).first()
    except SQLAlchemyError as exc:
        logger.error('notification_hint.fetch_next_failed', error=str(exc))
        raise
    if record is None:
        raise NotFoundError(RESOURCE)
    # keep the row readable after the session commits or closes
    session.expunge(record)
    return record


def get_next_notification_hint(session: Session, remove: bool = False) -> NotificationHint:
    """Return the hint with the smallest ``notify_at`` across all workspaces.

    With ``remove`` the hint is claimed: it is deleted by its key and only the
    caller whose delete affected the row gets it back. A caller that loses
    that race gets ``ClaimLostError`` and should simply poll again.
    """
    hint = _select_next(session)
    if not remove:
        return hint

    try:
        result = session.exec(
            delete(NotificationHint).where(_key_clause(hint.workspace_id, hint.block_id))
        )
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error(
            'notification_hint.claim_failed',
            block_id=hint.block_id,
            workspace_id=hint.workspace_id,
            error=str(exc),
        )
        raise
    if result.rowcount == 0:
        logger.debug(
            'notification_hint.claim_lost',
            block_id=hint.block_id,
            workspace_id=hint.workspace_id,
        )
        raise ClaimLostError(hint.block_id, hint.workspace_id)
    return hint


def peek_next_notification_hint(session: Session) -> NotificationHint:
    return get_next_notification_hint(session, remove=False)


def pop_next_notification_hint(session: Session) -> NotificationHint:
    return get_next_notification_hint(session, remove=True)