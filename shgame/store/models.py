# shgame/store/models.py
from __future__ import annotations

import asyncio
from typing import Any, Dict

import structlog

from shgame.store.codec import FieldType
from shgame.store.entity import Entity, EntityField

log = structlog.get_logger(__name__)


class Player(Entity):
    kind = "player"

    display_name = EntityField(FieldType.STRING, "")
    is_moderator = EntityField(FieldType.BOOL, False)
    seat_num = EntityField(FieldType.INT, None)
    role = EntityField(FieldType.STRING, "unassigned")  # unassigned | hitler | fascist | liberal
    status = EntityField(FieldType.STRING, "normal")    # normal | investigated | dead
    connected = EntityField(FieldType.BOOL, True)

    def serialize(self, hide_secrets: bool = True) -> Dict[str, Any]:
        safe = super().serialize()
        if hide_secrets:
            safe.pop("role", None)
        return safe


class Vote(Entity):
    kind = "vote"

    type = EntityField(FieldType.STRING, "elect")  # elect | join | kick | reset | confirmRole
    target1 = EntityField(FieldType.INT, 0)  # president / joiner / kick target
    target2 = EntityField(FieldType.INT, 0)  # chancellor
    data = EntityField(FieldType.STRING, "")  # display name of a join requester

    to_pass = EntityField(FieldType.INT, 1)   # yes votes needed to pass
    requires = EntityField(FieldType.INT, 1)  # ballots needed before evaluating
    yes_voters = EntityField(FieldType.CSV, [])
    no_voters = EntityField(FieldType.CSV, [])
    non_voters = EntityField(FieldType.CSV, [])  # not allowed to vote


class Game(Entity):
    kind = "game"

    phase = EntityField(FieldType.STRING, "setup")  # setup | night | nominate | vote | legislate | ...
    turn_order = EntityField(FieldType.CSV, [])  # seat order, not join order
    votes_in_progress = EntityField(FieldType.CSV, [])
    president = EntityField(FieldType.INT, 0)
    chancellor = EntityField(FieldType.INT, 0)
    last_president = EntityField(FieldType.INT, 0)
    last_chancellor = EntityField(FieldType.INT, 0)

    liberal_policies = EntityField(FieldType.INT, 0)
    fascist_policies = EntityField(FieldType.INT, 0)
    deck_liberal = EntityField(FieldType.INT, 6)
    deck_fascist = EntityField(FieldType.INT, 11)
    discard_liberal = EntityField(FieldType.INT, 0)
    discard_fascist = EntityField(FieldType.INT, 0)
    special_election = EntityField(FieldType.BOOL, False)
    failed_votes = EntityField(FieldType.INT, 0)

    def __init__(self, store, id: int):
        super().__init__(store, id)
        self.players: Dict[int, Player] = {}
        self.votes: Dict[int, Vote] = {}

    async def load_players(self) -> Dict[int, Player]:
        """Load every seated player concurrently, keyed by user id."""
        self.players = {pid: Player(self.store, pid) for pid in self.turn_order}
        found = await asyncio.gather(*(p.load() for p in self.players.values()))
        for pid, ok in zip(self.players, found):
            if not ok:
                log.warning("seated_player_missing", game_id=self.id, player_id=pid)
        return self.players

    async def load_votes(self) -> Dict[int, Vote]:
        """Load every in-progress vote concurrently, keyed by vote id."""
        self.votes = {vid: Vote(self.store, vid) for vid in self.votes_in_progress}
        found = await asyncio.gather(*(v.load() for v in self.votes.values()))
        for vid, ok in zip(self.votes, found):
            if not ok:
                log.warning("vote_in_progress_missing", game_id=self.id, vote_id=vid)
        return self.votes

    def serialize_players(self, hide_secrets: bool = True) -> Dict[int, Dict[str, Any]]:
        return {pid: p.serialize(hide_secrets) for pid, p in self.players.items()}

    def serialize_votes(self) -> Dict[int, Dict[str, Any]]:
        return {vid: v.serialize() for vid, v in self.votes.items()}
