from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .errors import ValidationError

GRID_SIZE = 5
SCHEMA_VERSION = 2

PLAYERS = ('yellow', 'green')
UNKNOWN_PLAYER = 'unknown'
NO_BONUS = 'none'

Cell = Tuple[int, int]


def as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f'{name} must be an integer')
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f'{name} must be an integer')
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} must be an integer') from None


def parse_shape(cells: Iterable[Any], allow_empty: bool = False) -> Tuple[Cell, ...]:
    """Turn ``[{"x": 0, "y": 1}, ...]`` (or ``[[0, 1], ...]``) into a tuple of cells.

    Duplicate cells collapse; order of first appearance is kept.
    """
    if cells is None or isinstance(cells, (str, bytes, dict)):
        raise ValidationError('shape must be a list of cells')
    out: List[Cell] = []
    seen = set()
    for cell in cells:
        if isinstance(cell, dict):
            x, y = cell.get('x'), cell.get('y')
        else:
            try:
                x, y = cell
            except (TypeError, ValueError):
                raise ValidationError(f'invalid shape cell: {cell!r}') from None
        x = as_int(x, 'shape x')
        y = as_int(y, 'shape y')
        if not (0 <= x < GRID_SIZE and 0 <= y < GRID_SIZE):
            raise ValidationError(f'shape cell ({x}, {y}) is outside the {GRID_SIZE}x{GRID_SIZE} grid')
        if (x, y) not in seen:
            seen.add((x, y))
            out.append((x, y))
    if not out and not allow_empty:
        raise ValidationError('shape must contain at least one cell')
    return tuple(out)


def shape_to_json(shape: Iterable[Cell]) -> List[Dict[str, int]]:
    return [{'x': x, 'y': y} for x, y in shape]


@dataclass
class Piece:
    """A tile in the piece library."""
    id: int
    shape: Tuple[Cell, ...]
    buttons: int = 0
    cost: int = 0
    time: int = 0
    color: Optional[str] = None

    @property
    def area(self) -> int:
        return len(self.shape)

    def piece_fields(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'shape': self.shape,
            'buttons': self.buttons,
            'cost': self.cost,
            'time': self.time,
            'color': self.color,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'shape': shape_to_json(self.shape),
            'buttons': self.buttons,
            'cost': self.cost,
            'time': self.time,
            'color': self.color,
        }

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        if 'id' not in data:
            raise ValidationError('piece record is missing its id')
        return {
            'id': as_int(data['id'], 'id'),
            # Legacy blobs may hold empty shapes; creation rejects them instead
            'shape': parse_shape(data.get('shape') or [], allow_empty=True),
            'buttons': as_int(data.get('buttons') or 0, 'buttons'),
            'cost': as_int(data.get('cost') or 0, 'cost'),
            'time': as_int(data.get('time') or 0, 'time'),
            'color': data.get('color') or None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Piece':
        return cls(**cls._fields_from_dict(data))


@dataclass
class PurchaseRecord(Piece):
    """Snapshot of a piece at the moment it was bought.

    The ``purchase_*`` metrics are frozen: they are written once, by the
    purchase workflow or by migration backfill, and never recomputed.
    """
    player: Optional[str] = None
    purchase_age: Optional[int] = None
    purchase_gross: Optional[int] = None
    purchase_net: Optional[int] = None
    purchase_net_per_time: Optional[float] = None
    purchase_net_per_time_per_area: Optional[float] = None

    def has_frozen_metrics(self) -> bool:
        return None not in (
            self.purchase_gross,
            self.purchase_net,
            self.purchase_net_per_time,
            self.purchase_net_per_time_per_area,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            'player': self.player,
            'purchaseAge': self.purchase_age,
            'purchaseGross': self.purchase_gross,
            'purchaseNet': self.purchase_net,
            'purchaseNetPerTime': self.purchase_net_per_time,
            'purchaseNetPerTimePerArea': self.purchase_net_per_time_per_area,
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PurchaseRecord':
        fields = cls._fields_from_dict(data)

        def optional(key, convert):
            value = data.get(key)
            return None if value is None else convert(value)

        def as_float(value):
            try:
                return float(value)
            except (TypeError, ValueError):
                raise ValidationError(f'invalid metric value: {value!r}') from None

        fields.update(
            player=data.get('player') or None,
            purchase_age=optional('purchaseAge', lambda v: as_int(v, 'purchaseAge')),
            purchase_gross=optional('purchaseGross', lambda v: as_int(v, 'purchaseGross')),
            purchase_net=optional('purchaseNet', lambda v: as_int(v, 'purchaseNet')),
            purchase_net_per_time=optional('purchaseNetPerTime', as_float),
            purchase_net_per_time_per_area=optional('purchaseNetPerTimePerArea', as_float),
        )
        return cls(**fields)


@dataclass
class GameState:
    """The whole persisted unit: library, purchases and end-game counters."""
    next_id: int = 1
    piece_library: List[Piece] = field(default_factory=list)
    purchased_pieces: List[PurchaseRecord] = field(default_factory=list)
    yellow_buttons: int = 0
    green_buttons: int = 0
    bonus_winner: str = NO_BONUS
    schema_version: int = SCHEMA_VERSION

    def find_piece(self, piece_id: int) -> Optional[Piece]:
        for piece in self.piece_library:
            if piece.id == piece_id:
                return piece
        return None

    def find_purchase(self, piece_id: int) -> Optional[PurchaseRecord]:
        for record in self.purchased_pieces:
            if record.id == piece_id:
                return record
        return None

    def purchased_ids(self) -> set:
        return {record.id for record in self.purchased_pieces}

    def available(self) -> List[Piece]:
        """Library pieces that have no purchase record."""
        taken = self.purchased_ids()
        return [piece for piece in self.piece_library if piece.id not in taken]

    def buttons_for(self, player: str) -> int:
        return self.yellow_buttons if player == 'yellow' else self.green_buttons

    def check_invariants(self) -> None:
        """Raise ValidationError if ids, counts or player names are out of domain."""
        for label, items in (('library', self.piece_library), ('purchase', self.purchased_pieces)):
            seen = set()
            for piece in items:
                if piece.id < 1:
                    raise ValidationError(f'{label} piece id {piece.id} must be positive')
                if piece.id in seen:
                    raise ValidationError(f'duplicate {label} piece id {piece.id}')
                seen.add(piece.id)
                for name in ('buttons', 'cost', 'time'):
                    if getattr(piece, name) < 0:
                        raise ValidationError(f'{label} piece {piece.id}: {name} must not be negative')
        for record in self.purchased_pieces:
            if record.player not in PLAYERS + (UNKNOWN_PLAYER,):
                raise ValidationError(f'purchase of piece {record.id} has unknown player {record.player!r}')
        if self.yellow_buttons < 0 or self.green_buttons < 0:
            raise ValidationError('button counts must not be negative')
        if self.bonus_winner not in PLAYERS + (NO_BONUS,):
            raise ValidationError(f'bonus winner must be one of {", ".join(PLAYERS + (NO_BONUS,))}')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'schemaVersion': self.schema_version,
            'nextId': self.next_id,
            'pieceLibrary': [p.to_dict() for p in self.piece_library],
            'purchasedPieces': [p.to_dict() for p in self.purchased_pieces],
            'yellowButtons': self.yellow_buttons,
            'greenButtons': self.green_buttons,
            'bonusWinner': self.bonus_winner,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameState':
        if not isinstance(data, dict):
            raise ValidationError('state blob must be a JSON object')
        return cls(
            next_id=as_int(data.get('nextId') or 1, 'nextId'),
            piece_library=[Piece.from_dict(p) for p in data.get('pieceLibrary') or []],
            purchased_pieces=[PurchaseRecord.from_dict(p) for p in data.get('purchasedPieces') or []],
            yellow_buttons=as_int(data.get('yellowButtons') or 0, 'yellowButtons'),
            green_buttons=as_int(data.get('greenButtons') or 0, 'greenButtons'),
            bonus_winner=data.get('bonusWinner') or NO_BONUS,
            # Blobs written before versioning carry no marker
            schema_version=as_int(data.get('schemaVersion') or 0, 'schemaVersion'),
        )
