from flask import current_app, request
from flask_socketio import emit

from herd import socketio
from herd.exceptions import JoinRejected, StoreFailure
from herd.services.session import engine
from herd.services.session.dispatcher import NAMESPACE


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _room_code(data) -> str:
    return (data or {}).get('roomCode') or ''


def handle_connect():
    emit('connected', {'message': f'Connected to {NAMESPACE}'})


def handle_disconnect(reason=None):
    try:
        engine.leave(_get_sid())
    except StoreFailure as exc:
        current_app.logger.warning(f"[leave] republish abandoned: {exc}")


def handle_join_lobby(data):
    data = data or {}
    try:
        engine.join_lobby(_room_code(data), data.get('name'), _get_sid())
    except JoinRejected as exc:
        current_app.logger.info(f"[join-rejected] room={exc.room_code} reason={exc.reason}")
        emit('joinRejected', {'roomCode': exc.room_code, 'reason': exc.reason})
    except StoreFailure as exc:
        current_app.logger.warning(f"[join] abandoned: {exc}")


def handle_watch_room(data):
    try:
        engine.watch_room(_room_code(data), _get_sid())
    except JoinRejected as exc:
        emit('joinRejected', {'roomCode': exc.room_code, 'reason': exc.reason})
    except StoreFailure as exc:
        current_app.logger.warning(f"[watch] abandoned: {exc}")


def handle_start_round(data):
    try:
        engine.start_round(_room_code(data))
    except StoreFailure as exc:
        current_app.logger.warning(f"[round-start] abandoned: {exc}")


def handle_submit_answer(data):
    data = data or {}
    try:
        engine.submit_answer(_room_code(data), data.get('name'), data.get('questionId'), data.get('answer'))
    except StoreFailure as exc:
        current_app.logger.warning(f"[submit] abandoned: {exc}")


def handle_show_answers(data):
    try:
        engine.reveal_answers(_room_code(data))
    except StoreFailure as exc:
        current_app.logger.warning(f"[reveal] abandoned: {exc}")


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('joinLobby', handle_join_lobby, namespace=NAMESPACE)
    socketio.on_event('watchRoom', handle_watch_room, namespace=NAMESPACE)
    socketio.on_event('startRound', handle_start_round, namespace=NAMESPACE)
    socketio.on_event('submitAnswer', handle_submit_answer, namespace=NAMESPACE)
    socketio.on_event('showAnswers', handle_show_answers, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)
