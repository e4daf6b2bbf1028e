from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
import json
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    # Import and register blueprints here
    from patchwork_helper.main import main
    flask_app.register_blueprint(main)

    from patchwork_helper.api.pieces import pieces
    flask_app.register_blueprint(pieces, url_prefix='/api')

    # One service per app; routes reach it through current_app.extensions
    from patchwork_helper.services.patchwork import PatchworkError, PatchworkService, SqlStateStore
    service = PatchworkService(
        SqlStateStore(game_id=int(flask_app.config.get('PATCHWORK_GAME_ID', 1))),
        default_color=flask_app.config.get('DEFAULT_PIECE_COLOR', '#4caf50'),
    )
    flask_app.extensions['patchwork'] = service

    with flask_app.app_context():
        import patchwork_helper.models  # noqa: F401
        db.create_all()

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the patchwork tables."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    @click.command('export-state')
    @click.argument('path', required=False, type=click.Path(dir_okay=False, writable=True))
    def export_state_command(path):
        """Writes the active game state as JSON to PATH (or stdout)."""
        with flask_app.app_context():
            blob = json.dumps(service.export_state(), indent=2)
        if path:
            with open(path, 'w', encoding='utf-8') as handle:
                handle.write(blob + '\n')
            print(f'State written to {path}')
        else:
            print(blob)

    @click.command('import-state')
    @click.argument('path', type=click.Path(exists=True, dir_okay=False))
    def import_state_command(path):
        """Replaces the active game state with the JSON blob at PATH."""
        with open(path, 'r', encoding='utf-8') as handle:
            blob = json.load(handle)
        with flask_app.app_context():
            try:
                state = service.import_state(blob)
            except PatchworkError as exc:
                raise click.ClickException(str(exc))
        print(f'Imported {len(state.piece_library)} pieces and {len(state.purchased_pieces)} purchases.')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(export_state_command)
    flask_app.cli.add_command(import_state_command)

    return flask_app
