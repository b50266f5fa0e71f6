"""Append-only record of answers.

One row per (room, player, question, round). A second submission for the
same tuple is ignored: the first write wins and nothing is ever updated or
deleted here.
"""
from typing import List, Optional

from herd import db
from herd.models import Answer, name_key, normalize_room_code


def _lookup(room_code, name, question_id, round_number):
    return Answer.query.filter_by(
        room_code=normalize_room_code(room_code),
        player_key=name_key(name),
        question_id=question_id,
        round_number=round_number,
    )


def append(room_code, name, question_id: int, round_number: int, text: str) -> bool:
    """Returns False when the tuple already has an answer."""
    if _lookup(room_code, name, question_id, round_number).first() is not None:
        return False
    db.session.add(Answer(
        room_code=normalize_room_code(room_code),
        player_name=str(name).strip(),
        player_key=name_key(name),
        question_id=question_id,
        round_number=round_number,
        answer=text,
    ))
    db.session.flush()
    return True


def query(room_code, question_id: int, round_number: int) -> List[Answer]:
    return Answer.query.filter_by(
        room_code=normalize_room_code(room_code),
        question_id=question_id,
        round_number=round_number,
    ).order_by(Answer.player_key.asc(), Answer.id.asc()).all()


def query_one(room_code, name, question_id: int, round_number: int) -> Optional[Answer]:
    return _lookup(room_code, name, question_id, round_number).first()
