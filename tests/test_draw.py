import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from santa.db import GameStatus, repo
from santa.db.models import Base
from santa.services import draw
from santa.services.assignment import NoSolution, validate


def create_session():
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)()


def make_game(session, *emails, verified=True):
    game = draw.create_game(session, "Admin@Example.com")
    participants = []
    for email in emails:
        participant = draw.add_participant(session, game, email)
        if verified:
            draw.verify_participant(session, participant)
        participants.append(participant)
    session.flush()
    return game, participants


def test_create_game_normalizes_admin_email():
    session = create_session()
    game, _ = make_game(session)
    assert game.admin_email == "admin@example.com"
    assert game.status == GameStatus.SETUP


def test_add_participant_normalizes_and_rejects_duplicates():
    session = create_session()
    game, (ann,) = make_game(session, "  Ann@Example.com ")
    assert ann.email == "ann@example.com"
    with pytest.raises(draw.DrawError):
        draw.add_participant(session, game, "ANN@example.com")
    assert [p.email for p in repo.list_verified_participants(session, game.id)] == ["ann@example.com"]


def test_draw_assigns_every_verified_participant():
    session = create_session()
    game, participants = make_game(session, "a@x.io", "b@x.io", "c@x.io", "d@x.io")

    result = draw.draw_game(session, game, seed=7)

    assert game.status == GameStatus.DRAWN
    assert game.drawn_at is not None
    ids = {p.id for p in participants}
    assert set(result.assignments) == ids
    assert set(result.assignments.values()) == ids
    for participant in participants:
        receiver = draw.get_receiver(session, participant)
        assert receiver is not None
        assert receiver.id == result.assignments[participant.id]
        assert result.receiver_of(participant).id == receiver.id


def test_draw_honours_exclusions():
    session = create_session()
    game, (a, b, c, d) = make_game(session, "a@x.io", "b@x.io", "c@x.io", "d@x.io")
    draw.set_exclusion(session, game, a.id, b.id)
    draw.set_exclusion(session, game, b.id, a.id)

    result = draw.draw_game(session, game, seed=3)

    assert result.assignments[a.id] != b.id
    assert result.assignments[b.id] != a.id
    roster = draw.build_roster(result.participants)
    pairs = [(str(g), str(r)) for g, r in result.assignments.items()]
    assert validate(roster, pairs)


def test_draw_ignores_unverified_participants():
    session = create_session()
    game, participants = make_game(session, "a@x.io", "b@x.io")
    late = draw.add_participant(session, game, "late@x.io")

    result = draw.draw_game(session, game, seed=1)

    assert late.id not in result.assignments
    assert late.assigned_to_participant_id is None
    assert result.assignments == {
        participants[0].id: participants[1].id,
        participants[1].id: participants[0].id,
    }


def test_draw_needs_two_verified_participants():
    session = create_session()
    game, _ = make_game(session, "a@x.io")
    draw.add_participant(session, game, "b@x.io")
    with pytest.raises(draw.DrawError):
        draw.draw_game(session, game)
    assert game.status == GameStatus.SETUP


def test_draw_surfaces_no_solution():
    session = create_session()
    game, (a, b) = make_game(session, "a@x.io", "b@x.io")
    draw.set_exclusion(session, game, a.id, b.id)
    draw.set_exclusion(session, game, b.id, a.id)

    with pytest.raises(NoSolution):
        draw.draw_game(session, game, seed=1)
    assert game.status == GameStatus.SETUP
    assert a.assigned_to_participant_id is None


def test_cannot_draw_twice():
    session = create_session()
    game, _ = make_game(session, "a@x.io", "b@x.io", "c@x.io")
    draw.draw_game(session, game, seed=2)
    with pytest.raises(draw.DrawError):
        draw.draw_game(session, game, seed=2)


def test_reset_draw_allows_redraw():
    session = create_session()
    game, participants = make_game(session, "a@x.io", "b@x.io", "c@x.io")
    draw.draw_game(session, game, seed=2)

    draw.reset_draw(session, game)

    assert game.status == GameStatus.SETUP
    assert game.drawn_at is None
    assert all(draw.get_receiver(session, p) is None for p in participants)
    draw.draw_game(session, game, seed=4)
    assert game.status == GameStatus.DRAWN


def test_set_exclusion_rules():
    session = create_session()
    game, (a, b) = make_game(session, "a@x.io", "b@x.io")
    other, (stranger,) = make_game(session, "s@x.io")

    with pytest.raises(draw.DrawError):
        draw.set_exclusion(session, game, a.id, a.id)
    with pytest.raises(draw.DrawError):
        draw.set_exclusion(session, game, a.id, stranger.id)
    with pytest.raises(draw.DrawError):
        draw.set_exclusion(session, game, stranger.id, a.id)

    draw.set_exclusion(session, game, a.id, b.id)
    assert a.exclusion_participant_id == b.id
    draw.set_exclusion(session, game, a.id, None)
    assert a.exclusion_participant_id is None


def test_no_changes_after_draw():
    session = create_session()
    game, (a, b) = make_game(session, "a@x.io", "b@x.io")
    draw.draw_game(session, game, seed=1)

    with pytest.raises(draw.DrawError):
        draw.set_exclusion(session, game, a.id, b.id)
    with pytest.raises(draw.DrawError):
        draw.add_participant(session, game, "c@x.io")


def test_build_roster_uses_row_ids():
    session = create_session()
    game, (a, b, c) = make_game(session, "a@x.io", "b@x.io", "c@x.io")
    draw.set_exclusion(session, game, c.id, a.id)

    roster = draw.build_roster([a, b, c])

    assert [p.id for p in roster] == [str(a.id), str(b.id), str(c.id)]
    assert roster[0].exclusion is None
    assert roster[2].exclusion == str(a.id)


def test_format_participant_label():
    session = create_session()
    game, (a,) = make_game(session, "a@x.io")
    assert draw.format_participant_label(a) == "a@x.io"
    a.display_name = "Ann <3 & Co"
    assert draw.format_participant_label(a) == "Ann <3 & Co"
