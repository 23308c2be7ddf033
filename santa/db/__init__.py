from santa.db.models import Base, Game, GameStatus, ParticipantRecord
from santa.db.session import SessionLocal, get_session, init_engine

__all__ = [
    "Base",
    "Game",
    "GameStatus",
    "ParticipantRecord",
    "SessionLocal",
    "get_session",
    "init_engine",
]
