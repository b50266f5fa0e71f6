from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from herd import db
from herd.models import Player, name_key, normalize_room_code


def find(room_code, name) -> Optional[Player]:
    return Player.query.filter_by(
        room_code=normalize_room_code(room_code), name_key=name_key(name)
    ).first()


def upsert(room_code, name) -> Player:
    """Insert the player unless the name already exists in any casing.

    The first-seen casing is kept; later joins under another casing map to
    the same row.
    """
    room_code = normalize_room_code(room_code)
    existing = find(room_code, name)
    if existing:
        return existing
    player = Player(room_code=room_code, name=str(name).strip(), name_key=name_key(name), submitted=False)
    db.session.add(player)
    try:
        db.session.flush()
    except IntegrityError:
        # Lost an insert race against another process; theirs is canonical.
        # Callers upsert first in their transaction, so nothing else is lost.
        db.session.rollback()
        return find(room_code, name)
    return player


def list_players(room_code) -> List[Player]:
    return Player.query.filter_by(room_code=normalize_room_code(room_code)).order_by(
        Player.name_key.asc()
    ).all()


def set_submitted(room_code, name, submitted: bool) -> bool:
    updated = Player.query.filter_by(
        room_code=normalize_room_code(room_code), name_key=name_key(name)
    ).update({'submitted': bool(submitted)}, synchronize_session='fetch')
    return updated > 0


def reset_submitted(room_code) -> int:
    return Player.query.filter_by(room_code=normalize_room_code(room_code)).update(
        {'submitted': False}, synchronize_session='fetch'
    )
