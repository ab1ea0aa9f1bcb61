from flask import Flask, current_app
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from quizroom.config import Config

socketio = SocketIO(async_mode=None)


def get_rooms():
    """The room state machine bound to the current app."""
    return current_app.extensions['quizroom']


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    origins = flask_app.config.get('CORS_ORIGINS', '*')
    CORS(flask_app, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    from quizroom.services.catalog import QuestionCatalog
    from quizroom.services.rooms.gateway import SocketIOGateway
    from quizroom.services.rooms.registry import RoomRegistry
    from quizroom.services.rooms.scheduler import QuestionFlowScheduler
    from quizroom.services.rooms.state_machine import RoomStateMachine

    cfg = flask_app.config
    namespace = cfg.get('SOCKETIO_NAMESPACE', '/')
    catalog = QuestionCatalog.from_file(cfg['QUESTIONS_PATH'], logger=flask_app.logger)
    gateway = SocketIOGateway(socketio, namespace=namespace)
    registry = RoomRegistry(
        code_length=int(cfg.get('ROOM_CODE_LENGTH', 4)),
        default_timer=cfg.get('DEFAULT_QUESTION_TIMER_SEC', 5),
        logger=flask_app.logger,
    )
    # Timers stay armed but never fire on their own in tests unless asked to
    background = not cfg.get('TESTING') or cfg.get('ENABLE_SCHEDULER_IN_TESTS')
    scheduler = QuestionFlowScheduler(
        registry,
        catalog,
        gateway,
        flask_app.logger,
        start_task=socketio.start_background_task if background else None,
        sleep=socketio.sleep,
        heartbeat_sec=int(cfg.get('TIMER_HEARTBEAT_SEC', 0)),
    )
    flask_app.extensions['quizroom'] = RoomStateMachine(
        registry,
        scheduler,
        gateway,
        catalog,
        flask_app.logger,
        max_name_length=int(cfg.get('MAX_NAME_LENGTH', 40)),
        empty_room_ttl=float(cfg.get('EMPTY_ROOM_TTL_SEC', 60)),
        max_question_timer=float(cfg.get('MAX_QUESTION_TIMER_SEC', 3600)),
    )

    from quizroom.main import main
    flask_app.register_blueprint(main)

    from quizroom.api.questions import questions
    flask_app.register_blueprint(questions, url_prefix='/api')

    from quizroom.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api')

    from quizroom.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    @click.command('check-questions')
    def check_questions_command():
        """Reports how many questions were loaded and from where."""
        click.echo(f'{len(catalog)} questions loaded from {catalog.source}')

    flask_app.cli.add_command(check_questions_command)

    return flask_app
