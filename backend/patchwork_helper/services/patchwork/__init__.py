"""Patchwork domain services: records, scoring, migration and purchases.

Everything in here except ``store`` and ``service`` is pure logic over a
``GameState`` and can be used without an app context. HTTP routes and CLI
commands go through ``PatchworkService`` so every mutation is a single
load -> mutate -> save cycle.
"""

from .errors import NotFoundError, PatchworkError, PersistenceError, ValidationError
from .records import GameState, Piece, PurchaseRecord
from .service import PatchworkService
from .store import SqlStateStore
