from datetime import datetime, timezone

from herd import db

ROOM_OPEN = 'open'
ROOM_CLOSED = 'closed'
MAX_NAME_LENGTH = 64


def normalize_room_code(code) -> str:
    """Room codes are case-insensitive and stored uppercased."""
    return str(code or '').strip().upper()


def name_key(name) -> str:
    """Lookup key for player names; names compare case-insensitively."""
    return str(name or '').strip().lower()


def _utcnow():
    return datetime.now(timezone.utc)


class Room(db.Model):
    __tablename__ = 'room'
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(16), unique=True, nullable=False, index=True)
    status = db.Column(db.String(16), nullable=False, default=ROOM_OPEN)  # open, closed
    current_round = db.Column(db.Integer, nullable=False, default=0)
    # Set iff a round is in progress
    active_question_id = db.Column(db.Integer, db.ForeignKey('question.id', ondelete='SET NULL'), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    # Deleting a room is a storage-layer concern; its players go with it
    players = db.relationship('Player', back_populates='room', cascade='all, delete-orphan', passive_deletes=True)

    def __init__(self, **kwargs):
        if 'code' in kwargs:
            kwargs['code'] = normalize_room_code(kwargs['code'])
        super(Room, self).__init__(**kwargs)

    @property
    def round_active(self) -> bool:
        return self.active_question_id is not None

    def to_dict(self):
        return {
            'code': self.code,
            'status': self.status,
            'current_round': self.current_round,
            'active_question_id': self.active_question_id,
        }


class Player(db.Model):
    __tablename__ = 'player'
    __table_args__ = (
        db.UniqueConstraint('room_code', 'name_key', name='uq_player_room_name'),
    )
    id = db.Column(db.Integer, primary_key=True)
    room_code = db.Column(db.String(16), db.ForeignKey('room.code', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(MAX_NAME_LENGTH), nullable=False)
    name_key = db.Column(db.String(MAX_NAME_LENGTH), nullable=False)
    submitted = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    room = db.relationship('Room', back_populates='players')

    def to_dict(self):
        return {
            'name': self.name,
            'submitted': bool(self.submitted),
        }


class Question(db.Model):
    __tablename__ = 'question'
    id = db.Column(db.Integer, primary_key=True)
    prompt = db.Column(db.Text, nullable=False)
    sort_number = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'prompt': self.prompt,
        }


class Answer(db.Model):
    __tablename__ = 'answer'
    __table_args__ = (
        db.UniqueConstraint('room_code', 'player_key', 'question_id', 'round_number', name='uq_answer_submission'),
    )
    id = db.Column(db.Integer, primary_key=True)
    room_code = db.Column(db.String(16), db.ForeignKey('room.code', ondelete='CASCADE'), nullable=False, index=True)
    player_name = db.Column(db.String(MAX_NAME_LENGTH), nullable=False)
    player_key = db.Column(db.String(MAX_NAME_LENGTH), nullable=False)
    question_id = db.Column(db.Integer, db.ForeignKey('question.id', ondelete='CASCADE'), nullable=False)
    round_number = db.Column(db.Integer, nullable=False)
    answer = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            'name': self.player_name,
            'answer': self.answer,
        }
