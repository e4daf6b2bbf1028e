from patchwork_helper import db


class LibraryPiece(db.Model):
    """One piece of the library, shared by every game; payload is the piece JSON."""
    __tablename__ = 'piece'
    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    position = db.Column(db.Integer, nullable=False, default=0)
    data = db.Column(db.Text, nullable=False)


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.Integer, primary_key=True)
    next_id = db.Column(db.Integer, nullable=False, default=1)
    yellow_buttons = db.Column(db.Integer, nullable=False, default=0)
    green_buttons = db.Column(db.Integer, nullable=False, default=0)
    bonus_winner = db.Column(db.String(16), nullable=False, default='none')
    schema_version = db.Column(db.Integer, nullable=False, default=0)
    purchases = db.relationship(
        'PurchasedPiece',
        back_populates='game',
        order_by='PurchasedPiece.position',
        cascade='all, delete-orphan',
    )


class PurchasedPiece(db.Model):
    """A purchase record of one game; payload is the record JSON incl. frozen metrics."""
    __tablename__ = 'purchased_piece'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id', ondelete='CASCADE'), nullable=False, index=True)
    piece_id = db.Column(db.Integer, nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)
    data = db.Column(db.Text, nullable=False)
    game = db.relationship('Game', back_populates='purchases')
