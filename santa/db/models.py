from __future__ import annotations

import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class GameStatus(str, enum.Enum):
    SETUP = "setup"
    DRAWN = "drawn"


class Game(Base):
    __tablename__ = "games"

    id = Column(Integer, primary_key=True)
    admin_email = Column(String, nullable=False)
    status = Column(
        Enum(GameStatus, name="game_status", values_callable=lambda e: [item.value for item in e]),
        nullable=False,
        default=GameStatus.SETUP,
        server_default=GameStatus.SETUP.value,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    drawn_at = Column(DateTime(timezone=True), nullable=True)

    participants = relationship(
        "ParticipantRecord",
        back_populates="game",
        cascade="all, delete-orphan",
        order_by="ParticipantRecord.id",
    )

    def __repr__(self) -> str:
        return f"<Game(id={self.id}, admin_email={self.admin_email}, status={self.status})>"


class ParticipantRecord(Base):
    __tablename__ = "participants"

    id = Column(Integer, primary_key=True)
    game_id = Column(Integer, ForeignKey("games.id", ondelete="CASCADE"), nullable=False, index=True)
    email = Column(String, nullable=False)
    display_name = Column(String, nullable=True)
    verified = Column(Boolean, default=False, nullable=False)
    exclusion_participant_id = Column(
        Integer, ForeignKey("participants.id", ondelete="SET NULL"), nullable=True
    )
    assigned_to_participant_id = Column(
        Integer, ForeignKey("participants.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    game = relationship("Game", back_populates="participants")
    exclusion = relationship("ParticipantRecord", foreign_keys=[exclusion_participant_id], remote_side=[id])
    assigned_to = relationship("ParticipantRecord", foreign_keys=[assigned_to_participant_id], remote_side=[id])

    __table_args__ = (
        UniqueConstraint("game_id", "email", name="uq_participants_game_email"),
    )

    def __repr__(self) -> str:
        return (
            "<ParticipantRecord(id={0}, game_id={1}, email={2}, verified={3})>"
        ).format(self.id, self.game_id, self.email, self.verified)
