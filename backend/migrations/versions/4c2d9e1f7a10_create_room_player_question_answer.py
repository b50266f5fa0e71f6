"""create room, player, question and answer tables

Revision ID: 4c2d9e1f7a10
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2d9e1f7a10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'question',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('prompt', sa.Text(), nullable=False),
        sa.Column('sort_number', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        'room',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(length=16), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='open'),
        sa.Column('current_round', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('active_question_id', sa.Integer(),
                  sa.ForeignKey('question.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_room_code', 'room', ['code'], unique=True)

    op.create_table(
        'player',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('room_code', sa.String(length=16),
                  sa.ForeignKey('room.code', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('name_key', sa.String(length=64), nullable=False),
        sa.Column('submitted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('room_code', 'name_key', name='uq_player_room_name'),
    )
    op.create_index('ix_player_room_code', 'player', ['room_code'])

    op.create_table(
        'answer',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('room_code', sa.String(length=16),
                  sa.ForeignKey('room.code', ondelete='CASCADE'), nullable=False),
        sa.Column('player_name', sa.String(length=64), nullable=False),
        sa.Column('player_key', sa.String(length=64), nullable=False),
        sa.Column('question_id', sa.Integer(),
                  sa.ForeignKey('question.id', ondelete='CASCADE'), nullable=False),
        sa.Column('round_number', sa.Integer(), nullable=False),
        sa.Column('answer', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('room_code', 'player_key', 'question_id', 'round_number',
                            name='uq_answer_submission'),
    )
    op.create_index('ix_answer_room_code', 'answer', ['room_code'])


def downgrade():
    op.drop_index('ix_answer_room_code', table_name='answer')
    op.drop_table('answer')
    op.drop_index('ix_player_room_code', table_name='player')
    op.drop_table('player')
    op.drop_index('ix_room_code', table_name='room')
    op.drop_table('room')
    op.drop_table('question')
