import asyncio
import random

import pytest

from fakes import SlowFirstPublisher, load_game, seed_game, seed_player, seed_vote
from shgame.domain.common.session import Session
from shgame.domain.voting.tally import resolve_tally, tally_vote
from shgame.store.errors import StoreError
from shgame.store.models import Vote


@pytest.mark.parametrize(
    "yes,no,requires,to_pass,eligible,expected",
    [
        (1, 0, 2, 1, 4, "pending"),    # quorum not reached yet
        (1, 1, 2, 1, 4, "passed"),
        (2, 0, 3, 2, 4, "pending"),    # pass threshold met but quorum is not
        (2, 1, 3, 2, 4, "passed"),
        (0, 2, 2, 3, 4, "failed"),     # 2 > 4 - 3
        (1, 1, 2, 3, 4, "pending"),    # neither threshold yet
        (1, 2, 3, 3, 4, "failed"),
        (3, 0, 3, 3, 3, "passed"),
    ],
)
def test_resolve_tally(yes, no, requires, to_pass, eligible, expected):
    assert resolve_tally(yes=yes, no=no, requires=requires, to_pass=to_pass, total_eligible=eligible) == expected


def test_resolve_tally_never_both_passed_and_failed():
    for yes in range(6):
        for no in range(6 - yes):
            out = resolve_tally(yes=yes, no=no, requires=1, to_pass=3, total_eligible=5)
            if yes >= 3:
                assert out == "passed"
            elif no > 2:
                assert out == "failed"
            else:
                assert out == "pending"


async def _kick_table(store, *, requires, to_pass, non_voters=()):
    await seed_game(store, turn_order=[1, 2, 3, 4], votes_in_progress=[50])
    for pid in (1, 2, 3, 4):
        await seed_player(store, pid, pid)
    await seed_vote(store, 50, type="kick", target1=4, requires=requires, to_pass=to_pass, non_voters=list(non_voters))


@pytest.mark.asyncio
async def test_pending_ballot_is_saved_and_published(session, store, publisher):
    await _kick_table(store, requires=3, to_pass=2)

    result = await tally_vote(session, 50, 1, "yes")

    assert result.outcome == "pending"
    v = Vote(store, 50)
    await v.load()
    assert v.yes_voters == [1]
    assert publisher.events == [
        {"room": 1, "game": {"votes_in_progress": [50]}, "players": None, "votes": {50: v.serialize()}}
    ]


@pytest.mark.asyncio
async def test_quorum_gates_evaluation(session, store, publisher):
    # to_pass=2, requires=3: two yes ballots do not resolve until a third arrives
    await _kick_table(store, requires=3, to_pass=2)

    assert (await tally_vote(session, 50, 1, "yes")).outcome == "pending"
    assert (await tally_vote(session, 50, 2, "yes")).outcome == "pending"
    assert (await tally_vote(session, 50, 3, "no")).outcome == "passed"


@pytest.mark.asyncio
async def test_resolves_on_exact_ballot(session, store):
    await _kick_table(store, requires=2, to_pass=2)

    assert (await tally_vote(session, 50, 1, "yes")).outcome == "pending"
    assert (await tally_vote(session, 50, 2, "yes")).outcome == "passed"
    # vote is gone once resolved
    late = await tally_vote(session, 50, 3, "yes")
    assert late.outcome == "rejected"
    assert late.reason == "vote completed"


@pytest.mark.asyncio
async def test_vote_fails_when_pass_impossible(session, store):
    # eligible = 4 - 1 = 3, to_pass = 2 -> fails on the 2nd no
    await _kick_table(store, requires=1, to_pass=2, non_voters=[4])

    assert (await tally_vote(session, 50, 1, "no")).outcome == "pending"
    assert (await tally_vote(session, 50, 2, "no")).outcome == "failed"
    game = await load_game(store)
    assert game.turn_order == [1, 2, 3, 4]
    assert game.votes_in_progress == []


@pytest.mark.asyncio
async def test_duplicate_ballot_rejected(session, store, publisher):
    await _kick_table(store, requires=4, to_pass=4)

    await tally_vote(session, 50, 1, "yes")
    again = await tally_vote(session, 50, 1, "no")

    assert again.outcome == "rejected"
    assert again.reason == "user has already voted"
    v = Vote(store, 50)
    await v.load()
    assert v.yes_voters == [1]
    assert v.no_voters == []
    assert len(publisher.events) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "vote_id,user_id,reason",
    [
        (99, 1, "vote completed"),
        (50, 8, "user not playing"),
        (50, 4, "user is not allowed to vote"),
    ],
)
async def test_invalid_ballots_change_nothing(session, store, publisher, vote_id, user_id, reason):
    await _kick_table(store, requires=1, to_pass=1, non_voters=[4])
    before = {k: dict(v) for k, v in store.data.items()}

    result = await tally_vote(session, vote_id, user_id, "yes")

    assert result.outcome == "rejected"
    assert result.reason == reason
    assert store.data == before
    assert publisher.events == []


@pytest.mark.asyncio
async def test_vote_listed_but_missing_is_completed(session, store):
    await seed_game(store, turn_order=[1], votes_in_progress=[7])
    result = await tally_vote(session, 7, 1, "yes")
    assert result.reason == "vote completed"
    assert "vote:7" not in store.data


@pytest.mark.asyncio
async def test_concurrent_ballots_are_all_counted(session, store):
    await _kick_table(store, requires=4, to_pass=4)

    results = await asyncio.gather(
        tally_vote(session, 50, 1, "yes"),
        tally_vote(session, 50, 2, "no"),
        tally_vote(session, 50, 3, "yes"),
    )

    assert [r.outcome for r in results] == ["pending"] * 3
    v = Vote(store, 50)
    await v.load()
    assert sorted(v.yes_voters) == [1, 3]
    assert v.no_voters == [2]
    assert "lock:vote:50" in store.locked


@pytest.mark.asyncio
async def test_concurrent_ballots_resolve_exactly_once(session, store, publisher):
    await _kick_table(store, requires=2, to_pass=2)

    results = await asyncio.gather(*(tally_vote(session, 50, pid, "yes") for pid in (1, 2, 3)))

    outcomes = sorted(r.outcome for r in results)
    assert outcomes == ["passed", "pending", "rejected"]
    game = await load_game(store)
    assert game.turn_order == [1, 2, 3]
    tombstones = [e for e in publisher.events if e["votes"] == {50: None}]
    assert len(tombstones) == 1


@pytest.mark.asyncio
async def test_store_failure_propagates(session, store, publisher):
    await _kick_table(store, requires=3, to_pass=3)
    store.fail_on.add("save")

    with pytest.raises(StoreError):
        await tally_vote(session, 50, 1, "yes")
    assert publisher.events == []


@pytest.mark.asyncio
async def test_pending_updates_publish_in_save_order(store):
    publisher = SlowFirstPublisher()
    session = Session(game_id=1, store=store, publisher=publisher, rng=random.Random(7))
    await _kick_table(store, requires=4, to_pass=4)

    await asyncio.gather(
        tally_vote(session, 50, 1, "yes"),
        tally_vote(session, 50, 2, "yes"),
    )

    assert [e["votes"][50]["yes_voters"] for e in publisher.events] == [[1], [1, 2]]
