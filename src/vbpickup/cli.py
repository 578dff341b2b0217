"""Command-line interface for running a pickup session."""

from __future__ import annotations

import argparse
import logging
import random
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from pydantic import ValidationError

from vbpickup.balancer import (
    InvalidTeamCount,
    distribute,
    export_teams_to_csv,
    filter_eligible,
    format_teams,
    skill_spread,
)
from vbpickup.config import get_rules, load_settings
from vbpickup.config_loader import RosterSnapshot
from vbpickup.persistence import DuplicatePlayerId, DuplicatePlayerIdentity, RosterStore


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check in players and build skill-balanced teams")
    parser.add_argument("--db", type=Path, default=None, help="Roster database path (default from VBPICKUP_DB_PATH)")
    parser.add_argument("--format", dest="session_format", default=None, help="Session format (INDOOR, QUADS, BEACH)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable info logging")
    sub = parser.add_subparsers(dest="command", required=True)

    register = sub.add_parser("register", help="Register a player (skill defaults to 0)")
    register.add_argument("name")
    register.add_argument("--skill", type=float, default=0.0)

    edit = sub.add_parser("edit", help="Change a player's name or skill")
    edit.add_argument("name", help="Current player name")
    edit.add_argument("--new-name", default=None)
    edit.add_argument("--skill", type=float, default=None)

    remove = sub.add_parser("remove", help="Delete a player from the roster")
    remove.add_argument("name")

    checkin = sub.add_parser("checkin", help="Check a registered player in")
    checkin.add_argument("names", nargs="+")

    checkout = sub.add_parser("checkout", help="Check a player out")
    checkout.add_argument("names", nargs="+")

    sub.add_parser("reset", help="Clear every check-in")
    sub.add_parser("players", help="List the roster")

    teams = sub.add_parser("teams", help="Distribute checked-in players into teams")
    teams.add_argument("-n", "--teams", type=int, default=None, help="Number of teams (default from session format)")
    teams.add_argument(
        "--tie-break",
        choices=("stable", "shuffle"),
        default=None,
        help="Ordering of equal-skill players (default stable)",
    )
    teams.add_argument("--seed", type=int, default=None, help="Seed for --tie-break shuffle")
    teams.add_argument("--output", type=Path, default=None, help="Optional CSV output path")
    teams.add_argument("--no-save", action="store_true", help="Do not store the result as the latest teams")

    export = sub.add_parser("export", help="Write the roster and check-ins to JSON")
    export.add_argument("path", type=Path)

    load = sub.add_parser("import", help="Replace the roster from a JSON snapshot")
    load.add_argument("path", type=Path)

    serve = sub.add_parser("serve", help="Run the REST API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    return parser.parse_args(argv)


def _lookup(store: RosterStore, name: str):
    player = store.find_by_name(name)
    if player is None:
        raise SystemExit(f"Player {name!r} not found. Please register first.")
    return player


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    settings = load_settings()
    if args.session_format:
        try:
            settings = replace(settings, rules=get_rules(args.session_format))
        except KeyError as exc:
            raise SystemExit(str(exc)) from exc
    if args.db is not None:
        settings = replace(settings, db_path=args.db)

    if args.command == "serve":
        import uvicorn

        from vbpickup.api import create_app

        uvicorn.run(create_app(settings=settings), host=args.host, port=args.port)
        return

    store = RosterStore(settings.db_path)

    if args.command == "register":
        try:
            player = store.register_player(args.name, skill=args.skill)
        except DuplicatePlayerIdentity:
            print("Player already registered.")
            return
        except ValidationError as exc:
            raise SystemExit(str(exc)) from exc
        if args.skill:
            print(f"Registered {player.name} (Skill: {player.skill:g})")
        else:
            print(f"Registered {player.name}. Waiting for admin to assign skill.")
    elif args.command == "edit":
        player = _lookup(store, args.name)
        try:
            updated = store.update_player(player.player_id, name=args.new_name, skill=args.skill)
        except (DuplicatePlayerIdentity, ValidationError) as exc:
            raise SystemExit(str(exc)) from exc
        print(f"Updated {updated.name} (Skill: {updated.skill:g})")
    elif args.command == "remove":
        player = _lookup(store, args.name)
        store.remove_player(player.player_id)
        print(f"Removed {player.name}")
    elif args.command == "checkin":
        for name in args.names:
            player = store.check_in_by_name(name)
            if player is None:
                print(f"{name}: Player not found. Please register first.")
            else:
                print(f"{player.name}: checked in")
    elif args.command == "checkout":
        for name in args.names:
            player = _lookup(store, name)
            store.set_checked_in(player.player_id, False)
            print(f"{player.name}: checked out")
    elif args.command == "reset":
        store.clear_all_check_ins()
        print("Cleared all check-ins")
    elif args.command == "players":
        checked_in = store.list_checked_in()
        players = store.list_players()
        print(f"Checked-in: {len(filter_eligible(players, checked_in))}/{len(players)}")
        for player in players:
            marker = "*" if player.player_id in checked_in else " "
            print(f"{marker} {player.name} (Skill: {player.skill:g})")
    elif args.command == "teams":
        eligible = filter_eligible(store.list_players(), store.list_checked_in())
        team_count = settings.resolve_team_count(len(eligible), args.teams)
        tie_break = args.tie_break or settings.tie_break
        rng = random.Random(args.seed) if args.seed is not None else None
        try:
            teams = distribute(eligible, team_count, tie_break=tie_break, rng=rng)
        except InvalidTeamCount as exc:
            raise SystemExit(str(exc)) from exc
        if not eligible:
            print("No players checked in")
        print(format_teams(teams))
        print(f"Skill spread: {skill_spread(teams):g}")
        if not args.no_save:
            store.save_distribution(teams, tie_break=tie_break)
        if args.output:
            args.output.write_text(export_teams_to_csv(teams), encoding="utf-8")
            print(f"Wrote teams to {args.output}")
    elif args.command == "export":
        snapshot = RosterSnapshot(
            players=store.list_players(),
            checked_in=sorted(store.list_checked_in()),
        )
        snapshot.save(args.path)
        print(f"Saved {len(snapshot.players)} players to {args.path}")
    elif args.command == "import":
        snapshot = RosterSnapshot.load(args.path)
        try:
            store.replace_roster(snapshot.players, snapshot.checked_in)
        except (DuplicatePlayerId, DuplicatePlayerIdentity) as exc:
            raise SystemExit(str(exc)) from exc
        print(f"Imported {len(snapshot.players)} players ({len(snapshot.checked_in)} checked in)")


if __name__ == "__main__":
    main()
