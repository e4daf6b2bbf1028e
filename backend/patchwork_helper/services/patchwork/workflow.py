"""State transitions on a GameState.

Each operation validates its input and looks up what it needs before it
mutates anything, so a raised ValidationError or NotFoundError leaves the
state exactly as it was.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Union

from .errors import NotFoundError, ValidationError
from .migration import DEFAULT_COLOR
from .records import NO_BONUS, PLAYERS, GameState, Piece, PurchaseRecord, as_int, parse_shape
from .scoring import check_age, compute_metrics_at_age

EDITABLE_FIELDS = ('shape', 'buttons', 'cost', 'time', 'color')


def _non_negative(value: Any, name: str) -> int:
    number = as_int(value, name)
    if number < 0:
        raise ValidationError(f'{name} must not be negative')
    return number


def _color(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError('color must be a non-empty string')
    return value.strip()


def _player(value: Any) -> str:
    if value not in PLAYERS:
        raise ValidationError(f"player must be one of {', '.join(PLAYERS)}")
    return value


def _clean_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"cannot edit field(s): {', '.join(sorted(unknown))}")
    cleaned: Dict[str, Any] = {}
    if 'shape' in fields:
        cleaned['shape'] = parse_shape(fields['shape'])
    for name in ('buttons', 'cost', 'time'):
        if name in fields:
            cleaned[name] = _non_negative(fields[name], name)
    if 'color' in fields:
        cleaned['color'] = _color(fields['color'])
    return cleaned


def create_piece(
    state: GameState,
    shape: Iterable[Any],
    buttons: Any = 0,
    cost: Any = 0,
    time: Any = 0,
    color: Optional[str] = None,
    default_color: str = DEFAULT_COLOR,
) -> Piece:
    piece = Piece(
        id=state.next_id,
        shape=parse_shape(shape),
        buttons=_non_negative(buttons, 'buttons'),
        cost=_non_negative(cost, 'cost'),
        time=_non_negative(time, 'time'),
        color=_color(color) if color is not None else default_color,
    )
    state.piece_library.append(piece)
    state.next_id += 1
    return piece


def update_piece(state: GameState, piece_id: int, fields: Dict[str, Any]) -> Piece:
    """Edit a library piece and mirror the change onto its purchase record.

    The purchase record keeps its player, purchase age and frozen metrics.
    """
    cleaned = _clean_fields(fields or {})
    piece = state.find_piece(piece_id)
    if piece is None:
        raise NotFoundError(f'piece {piece_id} not found')
    record = state.find_purchase(piece_id)
    for name, value in cleaned.items():
        setattr(piece, name, value)
        if record is not None:
            setattr(record, name, value)
    return piece


def delete_piece(state: GameState, piece_id: int) -> Union[Piece, PurchaseRecord]:
    """Remove a piece and any purchase of it. Not reversible."""
    piece = state.find_piece(piece_id)
    record = state.find_purchase(piece_id)
    if piece is None and record is None:
        raise NotFoundError(f'piece {piece_id} not found')
    state.piece_library = [p for p in state.piece_library if p.id != piece_id]
    state.purchased_pieces = [r for r in state.purchased_pieces if r.id != piece_id]
    return piece if piece is not None else record


def purchase(state: GameState, piece_id: int, player: str, current_age: int) -> PurchaseRecord:
    _player(player)
    check_age(current_age)
    piece = next((p for p in state.available() if p.id == piece_id), None)
    if piece is None:
        raise NotFoundError(f'piece {piece_id} is not available')
    stats = compute_metrics_at_age(piece, current_age)
    record = PurchaseRecord(
        **piece.piece_fields(),
        player=player,
        purchase_age=current_age,
        purchase_gross=stats.gross_score,
        purchase_net=stats.net_score,
        purchase_net_per_time=stats.net_score_per_time,
        purchase_net_per_time_per_area=stats.net_score_per_time_per_area,
    )
    state.purchased_pieces.append(record)
    return record


def return_to_pool(state: GameState, piece_id: int) -> PurchaseRecord:
    record = state.find_purchase(piece_id)
    if record is None:
        raise NotFoundError(f'no purchase of piece {piece_id}')
    state.purchased_pieces = [r for r in state.purchased_pieces if r.id != piece_id]
    return record


def set_buttons(state: GameState, player: str, value: Any) -> int:
    _player(player)
    buttons = _non_negative(value, f'{player} buttons')
    if player == 'yellow':
        state.yellow_buttons = buttons
    else:
        state.green_buttons = buttons
    return buttons


def set_bonus_winner(state: GameState, winner: str) -> str:
    if winner != NO_BONUS:
        _player(winner)
    state.bonus_winner = winner
    return winner


def new_game(state: GameState) -> None:
    """Start over with the same library: purchases and counters are cleared."""
    state.purchased_pieces = []
    state.yellow_buttons = 0
    state.green_buttons = 0
    state.bonus_winner = NO_BONUS
