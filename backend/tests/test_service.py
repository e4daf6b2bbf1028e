import json

import pytest

from patchwork_helper import db
from patchwork_helper.models import Game, LibraryPiece, PurchasedPiece
from patchwork_helper.services.patchwork import NotFoundError, PersistenceError, ValidationError

LINE3 = [[0, 0], [1, 0], [2, 0]]


def test_default_state_when_nothing_persisted(service):
    state = service.get_state()
    assert state.next_id == 1
    assert state.piece_library == []
    assert state.purchased_pieces == []
    assert (state.yellow_buttons, state.green_buttons, state.bonus_winner) == (0, 0, 'none')
    assert service.get_scores() == {'yellow': -162, 'green': -162}


def test_each_mutation_is_persisted(service, store):
    piece = service.create_piece(LINE3, buttons=2, cost=4, time=1)
    service.purchase(piece.id, 'yellow', 1)
    service.set_yellow_buttons(10)
    service.set_green_buttons(2)
    service.set_bonus_winner('yellow')

    saved = store.load()
    assert saved.find_purchase(piece.id).purchase_net == 20
    assert (saved.yellow_buttons, saved.green_buttons, saved.bonus_winner) == (10, 2, 'yellow')
    assert service.get_scores() == {'yellow': 20 + 10 + 7 - 162, 'green': 2 - 162}


def test_purchase_stays_frozen_across_ages(service):
    piece = service.create_piece(LINE3, buttons=2, cost=4, time=1)
    service.purchase(piece.id, 'yellow', 3)
    for age in range(1, 10):
        service.get_available(age)
    record = service.get_purchased()[0]
    assert record['purchaseAge'] == 3
    assert record['purchaseGross'] == 20
    assert record['purchaseNet'] == 16


def test_errors_leave_persisted_state_untouched(service, store):
    service.create_piece(LINE3)
    before = store.load()
    with pytest.raises(ValidationError):
        service.create_piece([])
    with pytest.raises(NotFoundError):
        service.return_to_pool(1)
    with pytest.raises(NotFoundError):
        service.purchase(5, 'green', 1)
    assert store.load() == before


def test_failed_save_surfaces_as_persistence_error(service, store, monkeypatch):
    service.create_piece(LINE3)
    before = store.load()

    def broken_save(state):
        raise PersistenceError('disk full')

    monkeypatch.setattr(store, 'save', broken_save)
    with pytest.raises(PersistenceError):
        service.create_piece(LINE3)
    monkeypatch.undo()
    assert store.load() == before


def test_legacy_rows_are_migrated_on_load(service, store):
    db.session.add(Game(id=1, next_id=2, yellow_buttons=0, green_buttons=0, bonus_winner='none', schema_version=0))
    legacy = {'id': 1, 'shape': [{'x': 0, 'y': 0}, {'x': 1, 'y': 0}, {'x': 2, 'y': 0}], 'buttons': 2, 'cost': 4, 'time': 1}
    db.session.add(LibraryPiece(id=1, position=0, data=json.dumps(legacy)))
    db.session.add(PurchasedPiece(game_id=1, piece_id=1, position=0, data=json.dumps(legacy)))
    db.session.commit()

    record = service.get_purchased()[0]
    assert record['player'] == 'unknown'
    assert record['purchaseAge'] == 1
    assert record['purchaseNet'] == 20
    assert record['color'] == '#4caf50'

    # the backfill was written back
    saved = store.load()
    assert saved.schema_version == 2
    assert saved.purchased_pieces[0].purchase_net == 20


def test_import_and_export_state(service):
    blob = {
        'nextId': 4,
        'pieceLibrary': [{'id': 2, 'shape': [{'x': 0, 'y': 0}], 'buttons': 1, 'cost': 1, 'time': 1}],
        'purchasedPieces': [
            # piece 3 is no longer in the library but still renders from its snapshot
            {'id': 3, 'shape': [{'x': 0, 'y': 0}, {'x': 0, 'y': 1}], 'buttons': 0, 'cost': 2, 'time': 2,
             'player': 'green', 'purchaseAge': 2},
        ],
        'greenButtons': 5,
    }
    state = service.import_state(blob)
    assert state.purchased_pieces[0].purchase_net == 2

    exported = service.export_state()
    assert exported['nextId'] == 4
    assert exported['greenButtons'] == 5
    assert exported['purchasedPieces'][0]['purchaseNet'] == 2
    assert [p['id'] for p in service.get_available(1)] == [2]
    assert service.get_scores()['green'] == 2 + 5 - 162


def test_new_game_clears_purchases(service):
    piece = service.create_piece(LINE3)
    service.purchase(piece.id, 'green', 1)
    service.set_green_buttons(9)
    state = service.new_game()
    assert state.purchased_pieces == []
    assert [p['id'] for p in service.get_available(1)] == [piece.id]
    assert service.get_scores()['green'] == -162


def _blob(**overrides):
    blob = {
        'nextId': 3,
        'pieceLibrary': [
            {'id': 1, 'shape': [{'x': 0, 'y': 0}], 'buttons': 1, 'cost': 1, 'time': 1},
            {'id': 2, 'shape': [{'x': 1, 'y': 0}], 'buttons': 0, 'cost': 2, 'time': 2},
        ],
        'purchasedPieces': [
            {'id': 1, 'shape': [{'x': 0, 'y': 0}], 'buttons': 1, 'cost': 1, 'time': 1,
             'player': 'yellow', 'purchaseAge': 1},
        ],
        'yellowButtons': 3,
        'greenButtons': 4,
        'bonusWinner': 'none',
    }
    blob.update(overrides)
    return blob


def test_import_accepts_well_formed_blob(service, store):
    service.import_state(_blob())
    saved = store.load()
    assert [p.id for p in saved.piece_library] == [1, 2]
    assert saved.find_purchase(1).player == 'yellow'


@pytest.mark.parametrize('overrides', [
    # duplicate library ids would collapse into one row
    {'pieceLibrary': [
        {'id': 1, 'shape': [{'x': 0, 'y': 0}], 'buttons': 1},
        {'id': 1, 'shape': [{'x': 1, 'y': 0}], 'buttons': 9},
    ]},
    {'purchasedPieces': [
        {'id': 1, 'shape': [{'x': 0, 'y': 0}], 'player': 'yellow', 'purchaseAge': 1},
        {'id': 1, 'shape': [{'x': 0, 'y': 0}], 'player': 'green', 'purchaseAge': 2},
    ]},
    {'pieceLibrary': [{'id': -4, 'shape': [{'x': 0, 'y': 0}]}]},
    {'pieceLibrary': [{'id': 0, 'shape': [{'x': 0, 'y': 0}]}]},
    {'pieceLibrary': [{'id': 1, 'shape': [{'x': 0, 'y': 0}], 'buttons': -3}]},
    {'pieceLibrary': [{'id': 1, 'shape': [{'x': 0, 'y': 0}], 'cost': -1}]},
    {'pieceLibrary': [{'id': 1, 'shape': [{'x': 0, 'y': 0}], 'time': -2}]},
    {'purchasedPieces': [{'id': 1, 'shape': [{'x': 0, 'y': 0}], 'time': -1, 'player': 'green', 'purchaseAge': 1}]},
    {'yellowButtons': -50},
    {'greenButtons': -1},
    {'bonusWinner': 'purple'},
    {'purchasedPieces': [{'id': 1, 'shape': [{'x': 0, 'y': 0}], 'player': 'red', 'purchaseAge': 1}]},
    {'pieceLibrary': [{'id': 1, 'shape': [{'x': 0, 'y': 0}], 'buttons': 2.5}]},
])
def test_import_rejects_out_of_domain_blobs(service, store, overrides):
    service.import_state(_blob())
    before = store.load()
    with pytest.raises(ValidationError):
        service.import_state(_blob(**overrides))
    assert store.load() == before
