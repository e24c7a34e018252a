from sqlalchemy import BigInteger, String
from sqlmodel import Field, SQLModel

from hintstore.core.config import settings
from hintstore.core.errors import ValidationError

BLOCK_TYPE_MAX_LEN = 10
ID_MAX_LEN = 36


class NotificationHint(SQLModel, table=True):
    """A pending reminder for one block in one workspace.

    ``(block_id, workspace_id)`` is the natural key. ``notify_at`` is owned by
    the store and is never taken from caller input.
    """

    __tablename__ = f'{settings.TABLE_PREFIX}notification_hints'

    block_type: str = Field(
        sa_type=String(BLOCK_TYPE_MAX_LEN),
        sa_column_kwargs={'nullable': False},
    )
    block_id: str = Field(primary_key=True, max_length=ID_MAX_LEN)
    workspace_id: str = Field(primary_key=True, max_length=ID_MAX_LEN)
    create_at: int = Field(default=0, sa_type=BigInteger, sa_column_kwargs={'nullable': False})
    notify_at: int = Field(default=0, sa_type=BigInteger, index=True, sa_column_kwargs={'nullable': False})

    def is_valid(self) -> None:
        _require('block id', self.block_id, ID_MAX_LEN)
        _require('workspace id', self.workspace_id, ID_MAX_LEN)
        _require('block type', self.block_type, BLOCK_TYPE_MAX_LEN)

    def clone(self) -> 'NotificationHint':
        return NotificationHint(
            block_type=self.block_type,
            block_id=self.block_id,
            workspace_id=self.workspace_id,
            create_at=self.create_at,
            notify_at=self.notify_at,
        )


def _require(label: str, value, max_len: int) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'invalid notification hint: missing {label}')
    if len(value) > max_len:
        raise ValidationError(f'invalid notification hint: {label} exceeds {max_len} characters')
