"""
Pool standings persistence with optimistic concurrency.

Pool.version is bumped on every standings write. A write only lands when the
row still carries the version that was read; otherwise the caller re-reads
and recomputes.
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy import update
from sqlmodel import Session, select

from padel_manager.models.match import Match
from padel_manager.models.pool import Pool
from padel_manager.services.standings import Standings, apply_match_result, rebuild_standings

logger = logging.getLogger(__name__)


class StandingsConflictError(Exception):
    """Raised when standings could not be written because the pool kept changing."""


def write_standings_if_current(session: Session, pool_id: int, expected_version: int, standings: Standings) -> bool:
    """Conditional UPDATE; returns False when another writer got there first. Does not commit."""
    result = session.execute(
        update(Pool)
        .where(Pool.id == pool_id, Pool.version == expected_version)
        .values(standings=standings, version=expected_version + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def read_pool(session: Session, pool_id: int) -> Optional[Pool]:
    pool = session.get(Pool, pool_id)
    if pool is not None:
        session.refresh(pool)
    return pool


def fold_match_into_pool(session: Session, pool_id: int, match: Any) -> Optional[Dict[str, Any]]:
    """
    Apply one completed match to its pool inside the caller's transaction.

    Returns the written standings, None when the pool does not exist, and
    raises StandingsConflictError when the pool version moved under us.
    """
    pool = read_pool(session, pool_id)
    if pool is None:
        logger.warning("Match %s references missing pool %s; standings not updated", match.id, pool_id)
        return None

    updated = apply_match_result(pool.standings or {}, match)
    if not write_standings_if_current(session, pool_id, pool.version, updated):
        logger.warning("Pool %s changed while applying match %s (version %s)", pool_id, match.id, pool.version)
        raise StandingsConflictError(f"Pool {pool_id} was updated concurrently")

    logger.info("Applied match %s to pool %s standings (version %s)", match.id, pool_id, pool.version + 1)
    return updated


def rebuild_pool_standings(session: Session, pool_id: int, max_retries: int = 3) -> Pool:
    """Recompute and store a pool's standings from its completed matches."""
    for attempt in range(1, max_retries + 1):
        pool = read_pool(session, pool_id)
        if pool is None:
            raise LookupError(f"Pool {pool_id} not found")

        matches = session.exec(select(Match).where(Match.pool_id == pool_id)).all()
        standings = rebuild_standings(matches)

        if write_standings_if_current(session, pool_id, pool.version, standings):
            session.commit()
            pool = read_pool(session, pool_id)
            logger.info("Rebuilt standings for pool %s from %d matches", pool_id, len(matches))
            return pool

        session.rollback()
        logger.warning("Pool %s rebuild attempt %d lost a version race; retrying", pool_id, attempt)

    raise StandingsConflictError(f"Pool {pool_id} kept changing; rebuild abandoned after {max_retries} attempts")
