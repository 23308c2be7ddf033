from __future__ import annotations

import datetime
from typing import Dict, List, Optional

from sqlalchemy import and_, select, update

from santa.db.models import Game, GameStatus, ParticipantRecord


def create_game(session, admin_email: str) -> Game:
    game = Game(admin_email=admin_email, status=GameStatus.SETUP)
    session.add(game)
    session.flush()
    return game


def get_game(session, game_id: int) -> Optional[Game]:
    return session.scalar(select(Game).where(Game.id == game_id))


def update_game_status(
    session,
    game: Game,
    status: GameStatus,
    drawn_at: Optional[datetime.datetime] = None,
) -> None:
    game.status = status
    game.drawn_at = drawn_at


def get_participant(session, participant_id: int) -> Optional[ParticipantRecord]:
    return session.scalar(select(ParticipantRecord).where(ParticipantRecord.id == participant_id))


def get_participant_by_email(session, game_id: int, email: str) -> Optional[ParticipantRecord]:
    return session.scalar(
        select(ParticipantRecord).where(
            and_(ParticipantRecord.game_id == game_id, ParticipantRecord.email == email)
        )
    )


def add_participant(
    session,
    game_id: int,
    email: str,
    display_name: Optional[str],
) -> ParticipantRecord:
    participant = ParticipantRecord(game_id=game_id, email=email, display_name=display_name)
    session.add(participant)
    session.flush()
    return participant


def list_verified_participants(session, game_id: int) -> List[ParticipantRecord]:
    return list(
        session.scalars(
            select(ParticipantRecord)
            .where(and_(ParticipantRecord.game_id == game_id, ParticipantRecord.verified.is_(True)))
            .order_by(ParticipantRecord.id)
        ).all()
    )


def mark_verified(session, participant: ParticipantRecord) -> None:
    participant.verified = True


def update_participant_exclusion(
    session,
    participant: ParticipantRecord,
    exclusion_participant_id: Optional[int],
) -> None:
    participant.exclusion_participant_id = exclusion_participant_id


def save_assignments(session, assignments: Dict[int, int]) -> None:
    for giver_id, receiver_id in assignments.items():
        session.execute(
            update(ParticipantRecord)
            .where(ParticipantRecord.id == giver_id)
            .values(assigned_to_participant_id=receiver_id)
        )


def clear_assignments(session, game_id: int) -> None:
    session.execute(
        update(ParticipantRecord)
        .where(ParticipantRecord.game_id == game_id)
        .values(assigned_to_participant_id=None)
    )
