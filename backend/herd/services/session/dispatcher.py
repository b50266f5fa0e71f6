"""Merged room view and the events that publish it.

Everything emitted to a room goes through here so every client sees the
same roster x presence join.
"""
from typing import Any, Dict, List, Optional

from herd import socketio
from herd.models import Answer, Player, Question, name_key, normalize_room_code
from . import roster
from .presence import presence

NAMESPACE = '/ws'


def channel(room_code) -> str:
    return f"room:{normalize_room_code(room_code)}"


def merged_view(room_code, roster_rows: Optional[List[Player]] = None) -> Dict[str, Any]:
    """Join roster rows (read now unless given) with live presence."""
    if roster_rows is None:
        roster_rows = roster.list_players(room_code)
    live = presence.active_names(room_code)
    players = []
    active_count = 0
    submitted_count = 0
    for p in roster_rows:
        active = name_key(p.name) in live
        players.append({'name': p.name, 'submitted': bool(p.submitted), 'active': active})
        if active:
            active_count += 1
            if p.submitted:
                submitted_count += 1
    return {
        'players': players,
        'activeCount': active_count,
        'submittedCount': submitted_count,
    }


def all_submitted(view: Dict[str, Any]) -> bool:
    return view['activeCount'] > 0 and view['submittedCount'] == view['activeCount']


def round_payload(question: Question, round_number: int, player_count: int,
                  my_answer: Optional[Answer] = None) -> Dict[str, Any]:
    return {
        'questionId': question.id,
        'prompt': question.prompt,
        'playerCount': player_count,
        'roundNumber': round_number,
        'myAnswer': my_answer.answer if my_answer else None,
    }


def publish_player_list(room_code, view: Dict[str, Any]) -> None:
    socketio.emit('playerList', view, to=channel(room_code), namespace=NAMESPACE)


def send_player_list(sid: str, view: Dict[str, Any]) -> None:
    socketio.emit('playerList', view, to=sid, namespace=NAMESPACE)


def publish_progress(room_code, view: Dict[str, Any], round_number: int) -> None:
    socketio.emit('submissionProgress', {
        'submittedCount': view['submittedCount'],
        'totalPlayers': view['activeCount'],
    }, to=channel(room_code), namespace=NAMESPACE)
    if all_submitted(view):
        socketio.emit('allSubmitted', {'roundNumber': round_number}, to=channel(room_code), namespace=NAMESPACE)


def publish_round(room_code, payload: Dict[str, Any]) -> None:
    socketio.emit('roundStarted', payload, to=channel(room_code), namespace=NAMESPACE)


def send_replay(sid: str, payload: Dict[str, Any]) -> None:
    """Private round replay for one (re)joining connection."""
    socketio.emit('roundStarted', payload, to=sid, namespace=NAMESPACE)


def publish_answers(room_code, answers: List[Answer]) -> None:
    socketio.emit('answersRevealed', [a.to_dict() for a in answers], to=channel(room_code), namespace=NAMESPACE)
