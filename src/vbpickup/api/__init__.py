"""REST API for pickup session check-in and team balancing."""

from __future__ import annotations

import logging
import random
from typing import Iterable

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response

from vbpickup.api.schemas import (
    CheckInListResponse,
    CheckInRequest,
    CheckInResponse,
    DistributionResponse,
    PlayerCreate,
    PlayerResponse,
    PlayerUpdate,
    TeamRequest,
    TeamResponse,
)
from vbpickup.balancer import (
    Team,
    distribute,
    export_teams_to_csv,
    filter_eligible,
    skill_spread,
)
from vbpickup.config import SessionSettings, load_settings
from vbpickup.models import Player
from vbpickup.persistence import DistributionRecord, DuplicatePlayerIdentity, RosterStore


logger = logging.getLogger(__name__)

NOT_REGISTERED_MESSAGE = "Player not found. Please register first."


def _player_to_response(player: Player, checked_in: Iterable[str] = ()) -> PlayerResponse:
    return PlayerResponse(
        player_id=player.player_id,
        name=player.name,
        skill=player.skill,
        created_at=player.created_at,
        checked_in=player.player_id in checked_in,
    )


def _teams_to_response(teams: Iterable[Team], checked_in: Iterable[str] = ()) -> list[TeamResponse]:
    checked = set(checked_in)
    return [
        TeamResponse(
            index=team.index,
            label=team.label,
            total_skill=team.total_skill,
            players=[_player_to_response(player, checked) for player in team.players],
        )
        for team in teams
    ]


def _record_to_response(record: DistributionRecord, checked_in: Iterable[str] = ()) -> DistributionResponse:
    return DistributionResponse(
        distribution_id=record.distribution_id,
        created_at=record.created_at,
        team_count=record.team_count,
        tie_break=record.tie_break,
        eligible_players=sum(len(team) for team in record.teams),
        spread=skill_spread(record.teams),
        teams=_teams_to_response(record.teams, checked_in),
    )


def create_app(
    store: RosterStore | None = None,
    settings: SessionSettings | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    store = store or RosterStore(settings.db_path)
    app = FastAPI(title="vbpickup")
    app.state.roster_store = store
    app.state.settings = settings

    def require_player(player_id: str) -> Player:
        player = store.get_player(player_id)
        if player is None:
            raise HTTPException(status_code=404, detail="Player not found")
        return player

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/players", response_model=list[PlayerResponse])
    async def list_players() -> list[PlayerResponse]:
        checked_in = store.list_checked_in()
        return [_player_to_response(player, checked_in) for player in store.list_players()]

    @app.post("/players", response_model=PlayerResponse, status_code=201)
    async def register_player(payload: PlayerCreate) -> PlayerResponse:
        try:
            player = store.register_player(payload.name, skill=payload.skill)
        except DuplicatePlayerIdentity as exc:
            raise HTTPException(status_code=409, detail="Player already registered.") from exc
        logger.info("Registered player %s (%s)", player.name, player.player_id)
        return _player_to_response(player)

    @app.get("/players/{player_id}", response_model=PlayerResponse)
    async def get_player(player_id: str) -> PlayerResponse:
        player = require_player(player_id)
        return _player_to_response(player, store.list_checked_in())

    @app.put("/players/{player_id}", response_model=PlayerResponse)
    async def update_player(player_id: str, payload: PlayerUpdate) -> PlayerResponse:
        require_player(player_id)
        try:
            player = store.update_player(player_id, name=payload.name, skill=payload.skill)
        except DuplicatePlayerIdentity as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _player_to_response(player, store.list_checked_in())

    @app.delete("/players/{player_id}", status_code=204)
    async def delete_player(player_id: str) -> Response:
        try:
            store.remove_player(player_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Player not found") from exc
        return Response(status_code=204)

    @app.get("/checkins", response_model=CheckInListResponse)
    async def list_checkins() -> CheckInListResponse:
        checked_in = store.list_checked_in()
        present = filter_eligible(store.list_players(), checked_in)
        return CheckInListResponse(
            count=len(present),
            players=[_player_to_response(player, checked_in) for player in present],
        )

    @app.post("/checkins", response_model=CheckInResponse)
    async def self_check_in(payload: CheckInRequest) -> CheckInResponse:
        player = store.check_in_by_name(payload.name)
        if player is None:
            raise HTTPException(status_code=404, detail=NOT_REGISTERED_MESSAGE)
        return CheckInResponse(
            player=_player_to_response(player, {player.player_id}),
            message="You are checked in!",
        )

    @app.put("/checkins/{player_id}", response_model=PlayerResponse)
    async def admin_check_in(player_id: str) -> PlayerResponse:
        try:
            store.set_checked_in(player_id, True)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Player not found") from exc
        return _player_to_response(require_player(player_id), {player_id})

    @app.delete("/checkins/{player_id}", response_model=PlayerResponse)
    async def check_out(player_id: str) -> PlayerResponse:
        player = require_player(player_id)
        store.set_checked_in(player_id, False)
        return _player_to_response(player)

    @app.delete("/checkins")
    async def reset_checkins() -> dict[str, int]:
        cleared = len(store.list_checked_in())
        store.clear_all_check_ins()
        logger.info("Cleared %d check-ins", cleared)
        return {"cleared": cleared}

    @app.post("/teams", response_model=DistributionResponse)
    async def build_teams(payload: TeamRequest | None = None) -> DistributionResponse:
        payload = payload or TeamRequest()
        checked_in = store.list_checked_in()
        eligible = filter_eligible(store.list_players(), checked_in)
        team_count = settings.resolve_team_count(len(eligible), payload.team_count)
        tie_break = payload.tie_break or settings.tie_break
        rng = random.Random(payload.seed) if payload.seed is not None else None
        teams = distribute(eligible, team_count, tie_break=tie_break, rng=rng)

        if payload.save:
            record = store.save_distribution(teams, tie_break=tie_break)
            return _record_to_response(record, checked_in)

        return DistributionResponse(
            team_count=team_count,
            tie_break=tie_break,
            eligible_players=len(eligible),
            spread=skill_spread(teams),
            teams=_teams_to_response(teams, checked_in),
        )

    @app.get("/teams/latest", response_model=DistributionResponse)
    async def latest_teams() -> DistributionResponse:
        record = store.get_latest_distribution()
        if record is None:
            raise HTTPException(status_code=404, detail="No teams generated yet")
        return _record_to_response(record)

    @app.get("/teams/latest/export.csv")
    async def export_latest_teams() -> Response:
        record = store.get_latest_distribution()
        if record is None:
            raise HTTPException(status_code=404, detail="No teams generated yet")
        return Response(
            content=export_teams_to_csv(record.teams),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename=teams-{record.distribution_id}.csv"},
        )

    return app
