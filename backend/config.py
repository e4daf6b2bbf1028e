import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///patchwork.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Row in the game table holding the active state blob
    PATCHWORK_GAME_ID = int(os.environ.get('PATCHWORK_GAME_ID', '1'))
    # Colour given to pieces created or loaded without one
    DEFAULT_PIECE_COLOR = os.environ.get('DEFAULT_PIECE_COLOR', '#4caf50')
    # Sort direction used by list endpoints when ?order= is omitted
    DEFAULT_SORT_DESCENDING = os.environ.get('DEFAULT_SORT_DESCENDING', 'false').lower() in ('1', 'true', 'yes')
