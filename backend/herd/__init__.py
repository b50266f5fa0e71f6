from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

SEED_QUESTIONS = [
    'Name a fruit that is yellow.',
    'Name something you take to the beach.',
    'Name a famous detective.',
    'Name a breakfast food.',
    'Name a country in South America.',
]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from herd.main import main
    flask_app.register_blueprint(main)

    from herd.api.players import players
    flask_app.register_blueprint(players, url_prefix='/api')

    # Register Socket.IO event handlers against the initialized socketio instance
    from herd.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from herd.models import Room, Question
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            db.session.add(Room(code='ABCD'))
            for idx, prompt in enumerate(SEED_QUESTIONS, start=1):
                db.session.add(Question(prompt=prompt, sort_number=idx))

            db.session.commit()
            print('Database has been reset and seeded with room ABCD!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
