"""Lightweight REST client for the vbpickup API."""

from __future__ import annotations

import argparse
import json

import httpx


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the vbpickup REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("--register", nargs="+", metavar="NAME", help="Register players (skill 0)")
    parser.add_argument("--checkin", nargs="+", metavar="NAME", help="Check players in by name")
    parser.add_argument("--reset", action="store_true", help="Clear all check-ins first")
    parser.add_argument("--teams", type=int, default=None, help="Number of teams to build")
    parser.add_argument("--shuffle-ties", action="store_true", help="Randomize order of equal-skill players")
    parser.add_argument("--seed", type=int, default=None, help="Seed for --shuffle-ties")
    parser.add_argument("--latest", action="store_true", help="Print the last saved teams and exit")
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url) as client:
        if args.latest:
            resp = client.get("/teams/latest")
            if resp.status_code == 404:
                raise SystemExit("no teams generated yet")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return

        if args.reset:
            resp = client.delete("/checkins")
            resp.raise_for_status()
            print(f"Cleared {resp.json()['cleared']} check-ins")

        for name in args.register or []:
            resp = client.post("/players", json={"name": name})
            if resp.status_code == 409:
                print(f"{name}: already registered")
                continue
            resp.raise_for_status()
            print(f"{name}: registered")

        for name in args.checkin or []:
            resp = client.post("/checkins", json={"name": name})
            if resp.status_code == 404:
                print(f"{name}: {resp.json()['detail']}")
                continue
            resp.raise_for_status()
            print(f"{name}: {resp.json()['message']}")

        request = {
            "team_count": args.teams,
            "tie_break": "shuffle" if args.shuffle_ties else "stable",
            "seed": args.seed,
        }
        resp = client.post("/teams", json=request)
        resp.raise_for_status()
        payload = resp.json()
        for team in payload["teams"]:
            names = ", ".join(player["name"] for player in team["players"])
            print(f"{team['label']} (Total Skill: {team['total_skill']:g}): {names}")
        print(f"Skill spread: {payload['spread']:g}")


if __name__ == "__main__":
    main()
