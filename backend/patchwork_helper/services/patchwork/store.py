import json
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from patchwork_helper import db
from patchwork_helper.models import Game, LibraryPiece, PurchasedPiece
from .errors import PatchworkError, PersistenceError
from .records import GameState


class SqlStateStore:
    """Reads and writes the whole GameState blob for one game row.

    ``save`` replaces the snapshot inside a single transaction; on failure the
    session is rolled back and nothing is written.
    """

    def __init__(self, game_id: int = 1):
        self.game_id = game_id

    def load(self) -> Optional[GameState]:
        try:
            game = db.session.get(Game, self.game_id)
            if game is None:
                return None
            pieces = LibraryPiece.query.order_by(LibraryPiece.position, LibraryPiece.id).all()
            blob = {
                'schemaVersion': game.schema_version,
                'nextId': game.next_id,
                'yellowButtons': game.yellow_buttons,
                'greenButtons': game.green_buttons,
                'bonusWinner': game.bonus_winner,
                'pieceLibrary': [json.loads(row.data) for row in pieces],
                'purchasedPieces': [json.loads(row.data) for row in game.purchases],
            }
            return GameState.from_dict(blob)
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise PersistenceError(f'could not load game {self.game_id}: {exc}') from exc
        except (ValueError, PatchworkError) as exc:
            raise PersistenceError(f'stored state for game {self.game_id} is corrupt: {exc}') from exc

    def save(self, state: GameState) -> None:
        try:
            game = db.session.get(Game, self.game_id)
            if game is None:
                game = Game(id=self.game_id)
                db.session.add(game)
            game.next_id = state.next_id
            game.yellow_buttons = state.yellow_buttons
            game.green_buttons = state.green_buttons
            game.bonus_winner = state.bonus_winner
            game.schema_version = state.schema_version

            keep_ids = [piece.id for piece in state.piece_library]
            LibraryPiece.query.filter(LibraryPiece.id.not_in(keep_ids)).delete(synchronize_session=False)
            for position, piece in enumerate(state.piece_library):
                db.session.merge(LibraryPiece(id=piece.id, position=position, data=json.dumps(piece.to_dict())))

            game.purchases = [
                PurchasedPiece(piece_id=record.id, position=position, data=json.dumps(record.to_dict()))
                for position, record in enumerate(state.purchased_pieces)
            ]
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise PersistenceError(f'could not save game {self.game_id}: {exc}') from exc
