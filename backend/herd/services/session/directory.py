from typing import List, Optional

from herd import db
from herd.models import Room, Question, ROOM_OPEN, ROOM_CLOSED, normalize_room_code


def get_room(code) -> Optional[Room]:
    return Room.query.filter_by(code=normalize_room_code(code)).first()


def set_round(code, round_number: int, question_id: Optional[int]) -> Room:
    """Bind the room's current round. Only the round engine calls this."""
    room = get_room(code)
    room.current_round = round_number
    room.active_question_id = question_id
    db.session.add(room)
    db.session.flush()
    return room


def set_status(code, status: str) -> Room:
    if status not in (ROOM_OPEN, ROOM_CLOSED):
        raise ValueError(f"Unknown room status: {status}")
    room = get_room(code)
    room.status = status
    db.session.add(room)
    db.session.flush()
    return room


def list_questions() -> List[Question]:
    # Unsorted questions go last, in creation order
    return Question.query.order_by(
        Question.sort_number.is_(None), Question.sort_number.asc(), Question.id.asc()
    ).all()


def get_question(question_id) -> Optional[Question]:
    if question_id is None:
        return None
    return db.session.get(Question, question_id)
