"""Idempotent "add to set and log it" updates.

An owner row keeps a denormalized integer array (e.g. ``users.watched_videos``)
next to an append-only log table with a unique ``(owner, member)`` key
(``user_video_views``). Both are written in the caller's transaction:

* the owner row is locked ``FOR UPDATE`` so concurrent calls for the same
  owner serialize on the array read-modify-write;
* the log insert uses ``ON CONFLICT DO NOTHING`` so the unique key, not the
  array check, guarantees at most one log row per pair.
"""
import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from academy.errors import NotFound
from academy.models.user import User
from academy.models.user_video_view import UserVideoView

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MembershipPair:
    owner_model: Any
    array_attr: str
    log_model: Any
    owner_fk: str
    member_fk: str
    owner_label: str = "Owner"

    @property
    def owner_pk(self):
        return self.owner_model.id

    @property
    def array_column(self):
        return getattr(self.owner_model, self.array_attr)


WATCHED_VIDEOS = MembershipPair(
    owner_model=User,
    array_attr="watched_videos",
    log_model=UserVideoView,
    owner_fk="user_id",
    member_fk="video_id",
    owner_label="User",
)


def merge_member(current: list[int] | None, member_id: int) -> tuple[list[int], bool]:
    """Return the array with ``member_id`` appended if missing, and whether it changed."""
    members = list(current or [])
    if member_id in members:
        return members, False
    members.append(member_id)
    return members, True


async def ensure_member(
    session: AsyncSession, pair: MembershipPair, owner_id: int, member_id: int
) -> list[int]:
    """Add ``member_id`` to the owner's array and log it; repeated calls are no-ops.

    Must run inside a transaction the caller commits or rolls back.
    """
    result = await session.execute(
        select(pair.owner_pk, pair.array_column).where(pair.owner_pk == owner_id).with_for_update()
    )
    row = result.first()
    if row is None:
        raise NotFound(f"{pair.owner_label} not found")

    members, changed = merge_member(row[1], member_id)
    if changed:
        await session.execute(
            update(pair.owner_model)
            .where(pair.owner_pk == owner_id)
            .values({pair.array_attr: members})
            .execution_options(synchronize_session=False)
        )

    await session.execute(
        pg_insert(pair.log_model)
        .values({pair.owner_fk: owner_id, pair.member_fk: member_id})
        .on_conflict_do_nothing(index_elements=[pair.owner_fk, pair.member_fk])
    )
    logger.debug(
        "ensure_member %s.%s owner=%s member=%s changed=%s",
        pair.owner_model.__tablename__, pair.array_attr, owner_id, member_id, changed,
    )
    return members


async def remove_member_everywhere(session: AsyncSession, pair: MembershipPair, member_id: int) -> int:
    """Drop ``member_id`` from every owner's array; returns the number of owners touched.

    Call this in the same transaction that deletes the member, whose log rows
    go with it through ``ON DELETE CASCADE``. Owner rows are updated before
    the member row is deleted, the same lock order ``ensure_member`` uses.
    """
    result = await session.execute(
        update(pair.owner_model)
        .where(pair.array_column.any(member_id))
        .values({pair.array_attr: func.array_remove(pair.array_column, member_id)})
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0
