"""Round engine: the only writer of a room's round state.

Each public operation is one event. Events for the same room are serialized
through the registry so their store round-trips never interleave; every
event commits once and publishes only after its commit.
"""
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from flask import current_app
from flask_socketio import join_room, leave_room
from sqlalchemy.exc import SQLAlchemyError

from herd import db
from herd.exceptions import JoinRejected, RoomClosed, RoomNotFound, StoreFailure
from herd.models import MAX_NAME_LENGTH, ROOM_CLOSED, name_key, normalize_room_code
from . import directory, dispatcher, ledger, roster
from .presence import presence
from .rotation import registry


@contextmanager
def _room_event(room_code: str, event: str):
    try:
        with registry.task(room_code) as state:
            try:
                yield state
            except SQLAlchemyError as exc:
                db.session.rollback()
                current_app.logger.error(f"[store-failure] room={room_code} event={event}: {exc}")
                raise StoreFailure(room_code, event) from exc
    finally:
        # Scratch state only outlives an event while someone is connected
        if presence.connection_count(room_code) == 0:
            registry.release(room_code)


def _validated_room(code: str, name=None):
    if not code:
        raise JoinRejected(code, 'Room code is required')
    if name is not None:
        if not name_key(name):
            raise JoinRejected(code, 'Name is required')
        if len(str(name).strip()) > MAX_NAME_LENGTH:
            raise JoinRejected(code, f'Name must be at most {MAX_NAME_LENGTH} characters')
    room = directory.get_room(code)
    if room is None:
        raise RoomNotFound(code)
    if room.status == ROOM_CLOSED:
        raise RoomClosed(code)
    return room


def _publish_roster(room_code: str, room=None) -> Dict[str, Any]:
    """Recompute the merged view and push it; progress only during a round."""
    view = dispatcher.merged_view(room_code)
    dispatcher.publish_player_list(room_code, view)
    if room is not None and room.round_active:
        dispatcher.publish_progress(room_code, view, room.current_round)
    return view


def _replay_for(room, name: Optional[str]):
    """(question, round number, my answer) for an active round, else None."""
    if not room.round_active:
        return None
    question = directory.get_question(room.active_question_id)
    if question is None:
        return None
    mine = ledger.query_one(room.code, name, question.id, room.current_round) if name else None
    return question, room.current_round, mine


def _send_replay(sid: str, replay, player_count: int) -> None:
    if replay is not None:
        question, round_number, mine = replay
        dispatcher.send_replay(sid, dispatcher.round_payload(question, round_number, player_count, mine))


def register_player(room_code, name):
    """Add a player to the roster ahead of their live connection."""
    code = normalize_room_code(room_code)
    with _room_event(code, 'register'):
        _validated_room(code, name)
        player = roster.upsert(code, name)
        db.session.commit()
        current_app.logger.info(f"[register] room={code} player={player.name}")
        _publish_roster(code)
        return player


def join_lobby(room_code, name, sid: str):
    """Bind a live connection to a player and rehydrate it.

    Every store read happens before presence changes or anything is sent,
    so a failed join leaves presence untouched and the room unaware of it.
    """
    code = normalize_room_code(room_code)
    with _room_event(code, 'join'):
        room = _validated_room(code, name)
        player = roster.upsert(code, name)
        db.session.commit()

        players = roster.list_players(code)
        replay = _replay_for(room, player.name)
        round_active, round_number = room.round_active, room.current_round

        previous = presence.bind(sid, code, player.name)
        join_room(dispatcher.channel(code), sid=sid, namespace=dispatcher.NAMESPACE)
        current_app.logger.info(f"[join] room={code} player={player.name} sid={sid}")

        view = dispatcher.merged_view(code, players)
        dispatcher.publish_player_list(code, view)
        if round_active:
            dispatcher.publish_progress(code, view, round_number)
        _send_replay(sid, replay, view['activeCount'])

    if previous and previous[0] != code:
        _switch_away(previous[0], sid)
    return player


def watch_room(room_code, sid: str) -> None:
    """Subscribe a display that is not a player (e.g. the operator screen)."""
    code = normalize_room_code(room_code)
    with _room_event(code, 'watch'):
        room = directory.get_room(code)
        if room is None:
            raise RoomNotFound(code)
        view = dispatcher.merged_view(code)
        replay = _replay_for(room, None)
        join_room(dispatcher.channel(code), sid=sid, namespace=dispatcher.NAMESPACE)
        dispatcher.send_player_list(sid, view)
        _send_replay(sid, replay, view['activeCount'])


def _switch_away(old_code: str, sid: str) -> None:
    leave_room(dispatcher.channel(old_code), sid=sid, namespace=dispatcher.NAMESPACE)
    with _room_event(old_code, 'switch'):
        _publish_roster(old_code, directory.get_room(old_code))


def start_round(room_code) -> Optional[int]:
    """Bind the next question and open a new round.

    Returns the new round number, or None when there is nothing to start
    (unknown or closed room, empty catalog).
    """
    code = normalize_room_code(room_code)
    with _room_event(code, 'start') as state:
        room = directory.get_room(code)
        if room is None or room.status == ROOM_CLOSED:
            current_app.logger.info(f"[round-skip] room={code} not startable")
            return None
        questions = directory.list_questions()
        policy = current_app.config.get('QUESTION_ROTATION', 'shuffle')
        question_id = state.rotation.next([q.id for q in questions], avoid=room.active_question_id, policy=policy)
        if question_id is None:
            current_app.logger.info(f"[round-skip] room={code} empty catalog")
            return None
        question = next(q for q in questions if q.id == question_id)

        round_number = room.current_round + 1
        directory.set_round(code, round_number, question_id)
        roster.reset_submitted(code)
        db.session.commit()
        current_app.logger.info(f"[round-start] room={code} round={round_number} question={question_id}")

        view = dispatcher.merged_view(code)
        dispatcher.publish_player_list(code, view)
        dispatcher.publish_round(code, dispatcher.round_payload(question, round_number, view['activeCount']))
        dispatcher.publish_progress(code, view, round_number)
        return round_number


def _coerce_question_id(value) -> Optional[int]:
    """Exact ids only: ints and digit strings. Floats and booleans are stale."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        value = value.strip()
        if value.isascii() and value.isdigit():
            return int(value)
    return None


def submit_answer(room_code, name, question_id, text) -> bool:
    """Record an answer for the active round.

    Answers for anything but the active question come from a stale client
    and are dropped. A repeated submission is ignored; the first one stands.
    """
    code = normalize_room_code(room_code)
    qid = _coerce_question_id(question_id)
    with _room_event(code, 'submit'):
        room = directory.get_room(code)
        if room is None or not room.round_active or qid != room.active_question_id:
            current_app.logger.debug(f"[submit-drop] room={code} player={name} question={question_id} stale")
            return False
        player = roster.find(code, name)
        if player is None:
            current_app.logger.debug(f"[submit-drop] room={code} player={name} not in roster")
            return False
        if not ledger.append(code, player.name, qid, room.current_round, '' if text is None else str(text)):
            current_app.logger.info(f"[submit-dup] room={code} player={name} round={room.current_round}")
            return False
        roster.set_submitted(code, name, True)
        db.session.commit()
        current_app.logger.info(f"[submit] room={code} player={name} round={room.current_round}")

        _publish_roster(code, room)
        return True


def reveal_answers(room_code) -> Optional[List[Dict[str, str]]]:
    code = normalize_room_code(room_code)
    with _room_event(code, 'reveal'):
        room = directory.get_room(code)
        if room is None or not room.round_active:
            return None
        answers = ledger.query(code, room.active_question_id, room.current_round)
        current_app.logger.info(f"[reveal] room={code} round={room.current_round} answers={len(answers)}")
        dispatcher.publish_answers(code, answers)
        return [a.to_dict() for a in answers]


def leave(sid: str) -> None:
    """Connection gone: drop its presence and republish the room.

    The unbind always happens, even if the republish fails; roster and
    ledger writes already committed are never undone.
    """
    binding = presence.unbind(sid)
    if binding is None:
        return
    code, name = binding
    current_app.logger.info(f"[leave] room={code} player={name} sid={sid}")
    with _room_event(code, 'leave'):
        _publish_roster(code, directory.get_room(code))


def room_snapshot(room_code) -> Dict[str, Any]:
    code = normalize_room_code(room_code)
    room = directory.get_room(code)
    if room is None:
        raise RoomNotFound(code)
    snapshot = room.to_dict()
    snapshot.update(dispatcher.merged_view(code))
    question = directory.get_question(room.active_question_id)
    snapshot['prompt'] = question.prompt if question else None
    return snapshot
