from enum import auto

from heliclockter import datetime_utc

from quiniela.models.db.match import Match
from quiniela.sql.matches import sql_set_match_lock_override
from quiniela.utils.errors import NotFound
from quiniela.utils.id_types import MatchId
from quiniela.utils.logging import logger
from quiniela.utils.types import EnumAutoStr


class MatchLockState(EnumAutoStr):
    OPEN = auto()
    LOCKED = auto()


def is_locked(match: Match, now: datetime_utc) -> bool:
    """
    Whether predictions for this match are frozen at `now`.

    The lock is derived on every read rather than stored. An explicit override wins over the
    kickoff time in both directions: `True` locks early, `False` keeps the match open after
    kickoff until an operator clears or flips the override again.
    """
    if match.lock_override is not None:
        return match.lock_override
    return now >= match.kickoff_at


def get_lock_state(match: Match, now: datetime_utc) -> MatchLockState:
    return MatchLockState.LOCKED if is_locked(match, now) else MatchLockState.OPEN


async def set_lock_override(match_id: MatchId, lock_override: bool | None) -> Match:
    match = await sql_set_match_lock_override(match_id, lock_override)
    if match is None:
        raise NotFound("Match", match_id)

    logger.info(
        "Match lock override changed: match_id=%s lock_override=%s state=%s",
        int(match_id),
        lock_override,
        get_lock_state(match, datetime_utc.now()).value,
    )
    return match
