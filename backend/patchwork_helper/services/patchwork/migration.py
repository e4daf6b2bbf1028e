"""Bring a freshly loaded GameState up to the current schema.

Blobs written by older clients can be missing colours, purchase ages,
players or the frozen purchase metrics. ``normalize_state`` fills those in
place, in a fixed order, and is idempotent: a second run changes nothing.

Schema versions:

    0  unversioned blobs (pieces may lack ``color``; purchases may lack
       ``player``, ``purchaseAge`` and the purchase metrics)
    1  colours always present
    2  purchases always carry player, age and frozen metrics
"""
from __future__ import annotations

from .records import SCHEMA_VERSION, UNKNOWN_PLAYER, GameState, Piece, PurchaseRecord
from .scoring import AGE_COUNT, compute_metrics_at_age

DEFAULT_COLOR = '#4caf50'


def _fill_color(piece: Piece, default_color: str) -> bool:
    if piece.color:
        return False
    piece.color = default_color
    return True


def _fill_purchase(record: PurchaseRecord) -> bool:
    changed = False
    if record.purchase_age is None or record.purchase_age < 1:
        record.purchase_age = 1
        changed = True
    elif record.purchase_age > AGE_COUNT:
        record.purchase_age = AGE_COUNT
        changed = True
    if not record.player:
        record.player = UNKNOWN_PLAYER
        changed = True
    if not record.has_frozen_metrics():
        # Only fill the gaps; values already frozen stay as they are
        stats = compute_metrics_at_age(record, record.purchase_age)
        if record.purchase_gross is None:
            record.purchase_gross = stats.gross_score
        if record.purchase_net is None:
            record.purchase_net = stats.net_score
        if record.purchase_net_per_time is None:
            record.purchase_net_per_time = stats.net_score_per_time
        if record.purchase_net_per_time_per_area is None:
            record.purchase_net_per_time_per_area = stats.net_score_per_time_per_area
        changed = True
    return changed


def normalize_state(state: GameState, default_color: str = DEFAULT_COLOR) -> bool:
    """Backfill missing fields on every piece and purchase record.

    Returns True if anything was changed.
    """
    changed = False
    for piece in state.piece_library:
        changed |= _fill_color(piece, default_color)
    for record in state.purchased_pieces:
        changed |= _fill_color(record, default_color)
        changed |= _fill_purchase(record)

    known_ids = [p.id for p in state.piece_library] + [r.id for r in state.purchased_pieces]
    if known_ids and state.next_id <= max(known_ids):
        state.next_id = max(known_ids) + 1
        changed = True
    if state.schema_version < SCHEMA_VERSION:
        state.schema_version = SCHEMA_VERSION
        changed = True
    return changed
