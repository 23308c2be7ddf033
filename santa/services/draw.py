from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from loguru import logger
from sqlalchemy.exc import IntegrityError

from santa.db import Game, GameStatus, ParticipantRecord, repo
from santa.services.assignment import AssignmentError, Participant, solve, validate


class DrawError(RuntimeError):
    pass


@dataclass(frozen=True)
class DrawResult:
    assignments: Dict[int, int]
    participants: List[ParticipantRecord]
    game: Game

    def receiver_of(self, giver: ParticipantRecord) -> Optional[ParticipantRecord]:
        receiver_id = self.assignments.get(giver.id)
        return next((p for p in self.participants if p.id == receiver_id), None)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def format_participant_label(participant: ParticipantRecord) -> str:
    if participant.display_name:
        return participant.display_name
    return participant.email


def _require_setup(game: Game, message: str) -> None:
    if game.status != GameStatus.SETUP:
        raise DrawError(message)


def create_game(session, admin_email: str) -> Game:
    return repo.create_game(session, normalize_email(admin_email))


def add_participant(
    session,
    game: Game,
    email: str,
    display_name: Optional[str] = None,
) -> ParticipantRecord:
    _require_setup(game, "Cannot add participants after the draw.")

    email = normalize_email(email)
    if not email:
        raise DrawError("Participant email is required.")
    if repo.get_participant_by_email(session, game.id, email):
        raise DrawError(f"{email} is already in this game.")

    try:
        participant = repo.add_participant(session, game.id, email, display_name or None)
    except IntegrityError as exc:
        raise DrawError(f"{email} is already in this game.") from exc
    logger.bind(game_id=game.id, participant_id=participant.id).info("Participant added")
    return participant


def verify_participant(session, participant: ParticipantRecord) -> None:
    repo.mark_verified(session, participant)


def set_exclusion(
    session,
    game: Game,
    participant_id: int,
    exclusion_participant_id: Optional[int],
) -> ParticipantRecord:
    _require_setup(game, "Cannot modify exclusions after the draw.")

    participant = repo.get_participant(session, participant_id)
    if participant is None or participant.game_id != game.id:
        raise DrawError("Participant not found.")

    if exclusion_participant_id is not None:
        target = repo.get_participant(session, exclusion_participant_id)
        if target is None or target.game_id != game.id:
            raise DrawError("Exclusion participant not in this game.")
        if target.id == participant.id:
            raise DrawError("Cannot exclude self.")

    repo.update_participant_exclusion(session, participant, exclusion_participant_id)
    logger.bind(
        game_id=game.id, participant_id=participant.id, exclusion=exclusion_participant_id
    ).info("Exclusion updated")
    return participant


def build_roster(participants: Sequence[ParticipantRecord]) -> List[Participant]:
    return [
        Participant(
            id=str(participant.id),
            exclusion=(
                str(participant.exclusion_participant_id)
                if participant.exclusion_participant_id is not None
                else None
            ),
        )
        for participant in participants
    ]


def draw_game(
    session,
    game: Game,
    rng=None,
    seed: Optional[int] = None,
) -> DrawResult:
    """Draw names for a game and store each giver's receiver.

    Raises ``DrawError`` when the game cannot be drawn yet and lets
    ``NoSolution`` through when the exclusions rule out every pairing.
    """
    _require_setup(game, "Game has already been drawn.")

    participants = repo.list_verified_participants(session, game.id)
    if len(participants) < 2:
        raise DrawError("Need at least 2 verified participants to draw.")

    roster = build_roster(participants)
    pairs = solve(roster, rng=rng, seed=seed)
    if not validate(roster, pairs):
        raise AssignmentError("Generated assignments failed validation.")

    assignments = {int(pair.giver): int(pair.receiver) for pair in pairs}
    repo.save_assignments(session, assignments)
    repo.update_game_status(
        session,
        game,
        GameStatus.DRAWN,
        drawn_at=datetime.datetime.now(datetime.timezone.utc),
    )
    logger.bind(game_id=game.id, participants=len(participants)).info("Names drawn")

    return DrawResult(assignments=assignments, participants=participants, game=game)


def reset_draw(session, game: Game) -> None:
    repo.clear_assignments(session, game.id)
    repo.update_game_status(session, game, GameStatus.SETUP, drawn_at=None)
    logger.bind(game_id=game.id).info("Draw reset")


def get_receiver(session, participant: ParticipantRecord) -> Optional[ParticipantRecord]:
    if participant.assigned_to_participant_id is None:
        return None
    return repo.get_participant(session, participant.assigned_to_participant_id)
