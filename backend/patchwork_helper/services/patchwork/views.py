from __future__ import annotations

from typing import Any, Dict, List, Optional

from .errors import ValidationError
from .records import GameState, PLAYERS, UNKNOWN_PLAYER
from .scoring import compute_current_metrics

AVAILABLE_SORT_KEYS = (
    'id', 'buttons', 'cost', 'time', 'area',
    'grossScore', 'netScore', 'netScorePerTime', 'netScorePerTimePerArea',
)
PURCHASED_SORT_KEYS = (
    'id', 'buttons', 'cost', 'time', 'area', 'purchaseAge',
    'purchaseGross', 'purchaseNet', 'purchaseNetPerTime', 'purchaseNetPerTimePerArea',
)


def _sorted(rows: List[Dict[str, Any]], sort_key: Optional[str], allowed, descending: bool):
    if not sort_key:
        return rows
    if sort_key not in allowed:
        raise ValidationError(f"cannot sort by {sort_key!r}; use one of {', '.join(allowed)}")
    return sorted(rows, key=lambda row: row[sort_key], reverse=descending)


def available_view(
    state: GameState,
    current_age: int,
    sort_key: Optional[str] = None,
    descending: bool = False,
) -> List[Dict[str, Any]]:
    """Available pieces with their live metrics at ``current_age``."""
    rows = []
    for piece in state.available():
        row = piece.to_dict()
        row.update(compute_current_metrics(piece, current_age).to_dict())
        rows.append(row)
    return _sorted(rows, sort_key, AVAILABLE_SORT_KEYS, descending)


def purchased_view(
    state: GameState,
    sort_key: Optional[str] = None,
    descending: bool = False,
    player: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Purchase records with the metrics frozen when they were bought."""
    if player is not None and player not in PLAYERS + (UNKNOWN_PLAYER,):
        raise ValidationError(f'unknown player: {player!r}')
    rows = []
    for record in state.purchased_pieces:
        if player is not None and record.player != player:
            continue
        row = record.to_dict()
        row['area'] = record.area
        rows.append(row)
    return _sorted(rows, sort_key, PURCHASED_SORT_KEYS, descending)
