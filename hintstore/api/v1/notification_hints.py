from datetime import timedelta
from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session
from hintstore.core.config import settings
from hintstore.core.errors import ClaimLostError, NotFoundError, ValidationError
from hintstore.db.session import get_session
from hintstore.models.notification_hint import NotificationHint
from hintstore.schemas.notification_hint import NotificationHintCreate, NotificationHintOut
from hintstore.services.notification_hint_service import (
    delete_notification_hint,
    get_next_notification_hint,
    get_notification_hint,
    upsert_notification_hint,
)

router = APIRouter(prefix='/notification-hints', tags=['notification-hints'])


def _to_out(record: NotificationHint) -> NotificationHintOut:
    return NotificationHintOut(
        block_type=record.block_type,
        block_id=record.block_id,
        workspace_id=record.workspace_id,
        create_at=record.create_at,
        notify_at=record.notify_at,
    )


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Notification hint not found')


@router.post('', response_model=NotificationHintOut, status_code=status.HTTP_201_CREATED)
def upsert_notification_hint_endpoint(
    payload: NotificationHintCreate,
    session: Session = Depends(get_session),
) -> NotificationHintOut:
    freq_seconds = payload.notify_freq_seconds or settings.NOTIFICATION_FREQ_SECONDS
    hint = NotificationHint(
        block_type=payload.block_type,
        block_id=payload.block_id,
        workspace_id=payload.workspace_id,
    )
    try:
        record = upsert_notification_hint(session, hint, timedelta(seconds=freq_seconds))
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.message) from exc
    return _to_out(record)


@router.get('/next', response_model=NotificationHintOut)
def next_notification_hint_endpoint(
    remove: bool = False,
    session: Session = Depends(get_session),
) -> NotificationHintOut:
    try:
        record = get_next_notification_hint(session, remove=remove)
    except NotFoundError as exc:
        raise _not_found() from exc
    except ClaimLostError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail='Notification hint already claimed') from exc
    return _to_out(record)


@router.get('/{workspace_id}/{block_id}', response_model=NotificationHintOut)
def get_notification_hint_endpoint(
    workspace_id: str,
    block_id: str,
    session: Session = Depends(get_session),
) -> NotificationHintOut:
    try:
        record = get_notification_hint(session, workspace_id, block_id)
    except NotFoundError as exc:
        raise _not_found() from exc
    return _to_out(record)


@router.delete('/{workspace_id}/{block_id}')
def delete_notification_hint_endpoint(
    workspace_id: str,
    block_id: str,
    session: Session = Depends(get_session),
) -> dict:
    try:
        delete_notification_hint(session, workspace_id, block_id)
    except NotFoundError as exc:
        raise _not_found() from exc
    return {'status': 'ok'}
