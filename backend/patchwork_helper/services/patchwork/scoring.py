"""Score metrics for pieces and final scores for players.

Every function here is pure: same inputs, same outputs, no state touched.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from .errors import ValidationError
from .records import PLAYERS, GameState, Piece

AGE_COUNT = 9
POINTS_PER_CELL = 2
BONUS_POINTS = 7
# 81 quilt spaces at -2 each on an empty board
EMPTY_BOARD_PENALTY = 162


@dataclass(frozen=True)
class Metrics:
    area: int
    remaining_paydays: int
    gross_score: int
    net_score: int
    net_score_per_time: float
    net_score_per_time_per_area: float

    def to_dict(self) -> Dict[str, float]:
        return {
            'area': self.area,
            'remainingPaydays': self.remaining_paydays,
            'grossScore': self.gross_score,
            'netScore': self.net_score,
            'netScorePerTime': self.net_score_per_time,
            'netScorePerTimePerArea': self.net_score_per_time_per_area,
        }


def check_age(age: int) -> int:
    if isinstance(age, bool) or not isinstance(age, int):
        raise ValidationError('age must be an integer')
    if not 1 <= age <= AGE_COUNT:
        raise ValidationError(f'age must be between 1 and {AGE_COUNT}')
    return age


def _metrics(piece: Piece, age: int) -> Metrics:
    check_age(age)
    area = piece.area
    remaining = AGE_COUNT - age + 1
    gross = area * POINTS_PER_CELL + piece.buttons * remaining
    net = gross - piece.cost
    per_time = net / piece.time if piece.time else float(net)
    per_time_area = net / (piece.time * area) if piece.time and area else 0.0
    return Metrics(
        area=area,
        remaining_paydays=remaining,
        gross_score=gross,
        net_score=net,
        net_score_per_time=per_time,
        net_score_per_time_per_area=per_time_area,
    )


def compute_current_metrics(piece: Piece, current_age: int) -> Metrics:
    """Live metrics for a piece still on offer, at the age currently selected."""
    return _metrics(piece, current_age)


def compute_metrics_at_age(piece: Piece, purchase_age: int) -> Metrics:
    """Metrics at the age a purchase happened; the caller freezes the result."""
    return _metrics(piece, purchase_age)


def final_score(state: GameState, player: str) -> int:
    """Purchase nets + leftover buttons + bonus tile - empty-board penalty."""
    if player not in PLAYERS:
        raise ValidationError(f'unknown player: {player!r}')
    purchased = sum(r.purchase_net or 0 for r in state.purchased_pieces if r.player == player)
    bonus = BONUS_POINTS if state.bonus_winner == player else 0
    return purchased + state.buttons_for(player) + bonus - EMPTY_BOARD_PENALTY


def final_scores(state: GameState) -> Dict[str, int]:
    return {player: final_score(state, player) for player in PLAYERS}
