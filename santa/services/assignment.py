from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple, Union

from loguru import logger


class AssignmentError(RuntimeError):
    pass


class InvalidInput(AssignmentError):
    """Malformed call: too few participants, empty or duplicate ids."""


class NoSolution(AssignmentError):
    """The exclusions leave no complete giver/receiver matching."""


@dataclass(frozen=True)
class Participant:
    id: str
    exclusion: Optional[str] = None


@dataclass(frozen=True)
class Assignment:
    giver: str
    receiver: str


Pair = Union[Assignment, Tuple[str, str]]


def _check_input(participants: Sequence[Participant]) -> None:
    if len(participants) < 2:
        raise InvalidInput("At least 2 participants are required.")

    seen: Set[str] = set()
    for participant in participants:
        if not isinstance(participant.id, str) or not participant.id:
            raise InvalidInput(f"Participant id must be a non-empty string, got {participant.id!r}.")
        if participant.id in seen:
            raise InvalidInput(f"Duplicate participant id {participant.id!r}.")
        seen.add(participant.id)

    for participant in participants:
        if participant.exclusion is not None and participant.exclusion not in seen:
            logger.bind(participant=participant.id, exclusion=participant.exclusion).warning(
                "Exclusion references an unknown participant, ignoring it"
            )


def candidate_receivers(participants: Sequence[Participant]) -> Dict[str, List[str]]:
    ids = [participant.id for participant in participants]
    return {
        participant.id: [
            receiver
            for receiver in ids
            if receiver != participant.id and receiver != participant.exclusion
        ]
        for participant in participants
    }


def _feasible(candidates: Dict[str, List[str]]) -> bool:
    if any(not receivers for receivers in candidates.values()):
        return False
    reachable: Set[str] = set()
    for receivers in candidates.values():
        reachable.update(receivers)
    return reachable == set(candidates)


def is_feasible(participants: Sequence[Participant]) -> bool:
    """Cheap necessary condition: everyone can give and everyone can receive.

    A ``True`` result does not guarantee that ``solve`` finds a matching.
    """
    _check_input(participants)
    return _feasible(candidate_receivers(participants))


def _make_rng(rng, seed: Optional[int]):
    if rng is not None:
        return rng
    if seed is not None:
        return random.Random(seed)
    return random.SystemRandom()


def solve(
    participants: Sequence[Participant],
    rng=None,
    seed: Optional[int] = None,
) -> List[Assignment]:
    """Draw a giver -> receiver pairing for every participant.

    Givers are processed in input order. Each giver's candidates are shuffled
    with ``rng`` and tried in turn; a dead end releases the previous giver's
    receiver and moves on to its next candidate. The search keeps its own
    stack so large groups do not run into the recursion limit.

    Raises ``InvalidInput`` for malformed participant lists and ``NoSolution``
    when the exclusions forbid every complete matching.
    """
    _check_input(participants)
    candidates = candidate_receivers(participants)
    if not _feasible(candidates):
        raise NoSolution("Assignment constraints are too strict to satisfy.")

    rng = _make_rng(rng, seed)
    givers = [participant.id for participant in participants]

    def shuffled(giver: str) -> Iterator[str]:
        choices = list(candidates[giver])
        rng.shuffle(choices)
        return iter(choices)

    chosen: List[str] = []
    claimed: Set[str] = set()
    frames: List[Iterator[str]] = [shuffled(givers[0])]
    backtracks = 0

    while frames:
        receiver = next((r for r in frames[-1] if r not in claimed), None)
        if receiver is None:
            frames.pop()
            if chosen:
                claimed.discard(chosen.pop())
                backtracks += 1
            continue

        chosen.append(receiver)
        claimed.add(receiver)
        if len(chosen) == len(givers):
            logger.bind(participants=len(givers), backtracks=backtracks).debug("Assignments generated")
            return [Assignment(giver, receiver) for giver, receiver in zip(givers, chosen)]
        frames.append(shuffled(givers[len(chosen)]))

    logger.bind(participants=len(givers), backtracks=backtracks).debug("Search exhausted")
    raise NoSolution("Failed to generate assignments with the given constraints.")


def solve_map(
    participants: Sequence[Participant],
    rng=None,
    seed: Optional[int] = None,
) -> Dict[str, str]:
    return {item.giver: item.receiver for item in solve(participants, rng=rng, seed=seed)}


def _as_pair(item: Pair) -> Tuple[str, str]:
    if isinstance(item, Assignment):
        return item.giver, item.receiver
    giver, receiver = item
    return giver, receiver


def validate(participants: Sequence[Participant], assignments: Iterable[Pair]) -> bool:
    """Check a proposed pairing against the participant list.

    Every participant must give exactly once and receive exactly once, nobody
    gives to themselves, and no giver draws their exclusion.
    """
    by_id = {participant.id: participant for participant in participants}
    if len(by_id) != len(participants):
        return False

    pairs = [_as_pair(item) for item in assignments]
    if len(pairs) != len(participants):
        return False

    givers: Set[str] = set()
    receivers: Set[str] = set()
    for giver, receiver in pairs:
        participant = by_id.get(giver)
        if participant is None or receiver not in by_id:
            return False
        if giver == receiver or receiver == participant.exclusion:
            return False
        if giver in givers or receiver in receivers:
            return False
        givers.add(giver)
        receivers.add(receiver)

    return len(givers) == len(by_id) and len(receivers) == len(by_id)
