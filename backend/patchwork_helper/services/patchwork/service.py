from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from flask import current_app

from . import workflow
from .migration import DEFAULT_COLOR, normalize_state
from .records import GameState, Piece, PurchaseRecord
from .scoring import check_age, final_scores
from .views import available_view, purchased_view


class PatchworkService:
    """Owns the state store and runs every operation as load -> mutate -> save.

    Nothing is cached between calls: each call reloads the persisted blob, so a
    failed save never leaves a half-applied state behind in memory.
    """

    def __init__(self, store, default_color: str = DEFAULT_COLOR):
        self.store = store
        self.default_color = default_color

    def _load(self) -> GameState:
        state = self.store.load()
        if state is None:
            current_app.logger.info(f"[load] game={self.store.game_id} no saved state, starting fresh")
            return GameState()
        from_version = state.schema_version
        if normalize_state(state, self.default_color):
            current_app.logger.info(
                f"[migrate] game={self.store.game_id} schema {from_version} -> {state.schema_version}"
            )
            self.store.save(state)
        return state

    def _apply(self, mutate: Callable[[GameState], Any]) -> Any:
        state = self._load()
        result = mutate(state)
        self.store.save(state)
        return result

    # ---- mutations ----

    def create_piece(self, shape, buttons=0, cost=0, time=0, color=None) -> Piece:
        piece = self._apply(lambda s: workflow.create_piece(
            s, shape, buttons, cost, time, color, default_color=self.default_color,
        ))
        current_app.logger.info(f"[create] piece={piece.id} area={piece.area}")
        return piece

    def update_piece(self, piece_id: int, fields: Dict[str, Any]) -> Piece:
        piece = self._apply(lambda s: workflow.update_piece(s, piece_id, fields))
        current_app.logger.info(f"[update] piece={piece_id} fields={sorted(fields)}")
        return piece

    def delete_piece(self, piece_id: int) -> Piece:
        piece = self._apply(lambda s: workflow.delete_piece(s, piece_id))
        current_app.logger.info(f"[delete] piece={piece_id}")
        return piece

    def purchase(self, piece_id: int, player: str, current_age: int) -> PurchaseRecord:
        record = self._apply(lambda s: workflow.purchase(s, piece_id, player, current_age))
        current_app.logger.info(
            f"[purchase] piece={piece_id} player={player} age={current_age} net={record.purchase_net}"
        )
        return record

    def return_to_pool(self, piece_id: int) -> PurchaseRecord:
        record = self._apply(lambda s: workflow.return_to_pool(s, piece_id))
        current_app.logger.info(f"[return] piece={piece_id} from={record.player}")
        return record

    def set_yellow_buttons(self, value) -> int:
        return self._apply(lambda s: workflow.set_buttons(s, 'yellow', value))

    def set_green_buttons(self, value) -> int:
        return self._apply(lambda s: workflow.set_buttons(s, 'green', value))

    def set_bonus_winner(self, winner: str) -> str:
        return self._apply(lambda s: workflow.set_bonus_winner(s, winner))

    def new_game(self) -> GameState:
        def reset(state):
            workflow.new_game(state)
            return state
        state = self._apply(reset)
        current_app.logger.info(f"[new_game] game={self.store.game_id} library={len(state.piece_library)}")
        return state

    def import_state(self, blob: Dict[str, Any]) -> GameState:
        state = GameState.from_dict(blob)
        normalize_state(state, self.default_color)
        state.check_invariants()
        self.store.save(state)
        current_app.logger.info(
            f"[import] game={self.store.game_id} pieces={len(state.piece_library)} "
            f"purchases={len(state.purchased_pieces)}"
        )
        return state

    # ---- reads ----

    def get_state(self) -> GameState:
        return self._load()

    def export_state(self) -> Dict[str, Any]:
        return self._load().to_dict()

    def get_available(self, current_age: int, sort_key: Optional[str] = None,
                      descending: bool = False) -> List[Dict[str, Any]]:
        check_age(current_age)
        return available_view(self._load(), current_age, sort_key, descending)

    def get_purchased(self, sort_key: Optional[str] = None, descending: bool = False,
                      player: Optional[str] = None) -> List[Dict[str, Any]]:
        return purchased_view(self._load(), sort_key, descending, player)

    def get_scores(self) -> Dict[str, int]:
        return final_scores(self._load())
