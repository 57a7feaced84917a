"""fasttrack: drive the live fasting timer from a terminal.

Examples:
  fasttrack login alice                 # prints an access token
  export FASTTRACK_TOKEN=<token>
  fasttrack start --notes "water only"
  fasttrack watch                       # live HH:MM:SS display, Ctrl-C to leave
  fasttrack pause / resume / stop
  fasttrack add --start-date 2024-05-01 --start-hour 20 --end-hour 12

Token precedence: --token, then env FASTTRACK_TOKEN. The API base URL comes
from --base-url or env FASTTRACK_API_URL.

Exit codes:
  0 = success
  1 = handled application error (the action was refused or blocked)
  2 = network/HTTP error
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import json
import os
import sys
from datetime import date
from functools import partial
from typing import Any, List, Optional

import httpx

from ..core.config import settings
from ..services.fastcalc import describe, duration_between, parse_iso
from .api import DEFAULT_BASE_URL, TimerApiClient, TimerApiError
from .entry import ManualFastEntry
from .timer import LiveFastTimer


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="fasttrack", description="Track fasts against a FastTrack server.")
    p.add_argument("--base-url", default=os.getenv("FASTTRACK_API_URL", DEFAULT_BASE_URL),
                   help=f"API base URL (default: env FASTTRACK_API_URL or {DEFAULT_BASE_URL})")
    p.add_argument("--token", default=None, help="Access token. Overrides env FASTTRACK_TOKEN.")
    p.add_argument("--api-key", default=os.getenv("FASTTRACK_API_KEY"),
                   help="Service API key (acts for --user).")
    p.add_argument("--user", default=os.getenv("FASTTRACK_USER"),
                   help="User id. Looked up from the token when omitted.")
    p.add_argument("--timeout", type=float, default=15.0, help="HTTP timeout in seconds (default: 15)")

    sub = p.add_subparsers(dest="command", required=True)
    for name in ("login", "register"):
        sp = sub.add_parser(name, help=f"{name} and print the tokens")
        sp.add_argument("username")
        sp.add_argument("--password", default=None, help="Prompted for when omitted.")
    sub.add_parser("status", help="Show the current timer")
    sp = sub.add_parser("start", help="Start a fast now")
    sp.add_argument("--notes", default="")
    sub.add_parser("pause", help="Pause the running fast")
    sub.add_parser("resume", help="Resume a paused fast")
    sub.add_parser("stop", help="Stop the fast and save it to history")
    sp = sub.add_parser("notes", help="Replace the running fast's notes")
    sp.add_argument("text")
    sp = sub.add_parser("add", help="Add a past fast by date and hour")
    sp.add_argument("--start-date", type=date.fromisoformat, default=None)
    sp.add_argument("--start-hour", type=int, default=settings.DEFAULT_START_HOUR)
    sp.add_argument("--end-date", type=date.fromisoformat, default=None)
    sp.add_argument("--end-hour", type=int, default=settings.DEFAULT_END_HOUR)
    sp.add_argument("--notes", default="")
    sp = sub.add_parser("history", help="List recent fasts")
    sp.add_argument("--limit", type=int, default=20)
    sub.add_parser("stats", help="Summarize fast history")
    sub.add_parser("watch", help="Live timer display until Ctrl-C")
    return p.parse_args(argv)


def resolve_token(cli_token: Optional[str]) -> Optional[str]:
    return cli_token or os.getenv("FASTTRACK_TOKEN")


class AlertCollector:
    """Prints alerts to stderr and remembers that one fired."""

    def __init__(self) -> None:
        self.fired = False

    def __call__(self, message: str) -> None:
        self.fired = True
        print(f"ERROR: {message}", file=sys.stderr)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


def _fast_line(fast: dict) -> str:
    start = parse_iso(fast["startTime"])
    end = parse_iso(fast["endTime"])
    notes = f"  {fast['notes']}" if fast.get("notes") else ""
    return f"{start:%Y-%m-%d %H:%M} -> {end:%Y-%m-%d %H:%M}  {describe(duration_between(start, end))}{notes}"


async def _resolve_user(api: TimerApiClient, args: argparse.Namespace) -> str:
    if args.user:
        return args.user
    return (await api.me())["id"]


def _pause_refusal(timer: LiveFastTimer, command: str) -> Optional[str]:
    if not timer.is_active:
        return "no fast is running"
    if command == "pause" and timer.is_paused:
        return "the fast is already paused"
    if command == "resume" and not timer.is_paused:
        return "the fast is not paused"
    return None


async def _watch(timer: LiveFastTimer) -> None:
    def show(t: LiveFastTimer) -> None:
        print(f"\r{t.display}", end="", flush=True)

    timer.on_tick = show
    show(timer)
    try:
        while True:
            await asyncio.sleep(3600)
    except asyncio.CancelledError:
        pass
    finally:
        await timer.close()
        print()


async def run(args: argparse.Namespace, transport: httpx.AsyncBaseTransport | None = None) -> int:
    token = resolve_token(args.token)
    alert = AlertCollector()
    async with TimerApiClient(args.base_url, token=token, api_key=args.api_key,
                              timeout=args.timeout, transport=transport) as api:
        if args.command in ("login", "register"):
            password = args.password or getpass.getpass("Password: ")
            action = api.login if args.command == "login" else api.register
            _print_json(await action(args.username, password))
            return 0

        user_id = await _resolve_user(api, args)

        if args.command == "history":
            for fast in await api.list_fasts(user_id, limit=args.limit):
                print(_fast_line(fast))
            return 0
        if args.command == "stats":
            _print_json(await api.fast_stats(user_id))
            return 0
        if args.command == "add":
            entry = ManualFastEntry(partial(api.add_fast, user_id), alert=alert)
            entry.start_date = args.start_date or entry.start_date
            entry.end_date = args.end_date or entry.start_date
            entry.start_hour, entry.end_hour = args.start_hour, args.end_hour
            entry.notes = args.notes
            summary = entry.summary()
            if not await entry.submit():
                return 1
            print(f"Added fast: {summary}")
            return 0

        timer = LiveFastTimer(api, user_id, partial(api.add_fast, user_id), alert=alert)
        await timer.load()
        try:
            if args.command == "status":
                pass
            elif args.command == "start":
                if timer.is_active:
                    print("ERROR: a fast is already running", file=sys.stderr)
                    return 1
                timer.notes = args.notes
                await timer.start()
            elif args.command in ("pause", "resume"):
                refusal = _pause_refusal(timer, args.command)
                if refusal:
                    print(f"ERROR: {refusal}", file=sys.stderr)
                    return 1
                await (timer.pause() if args.command == "pause" else timer.resume())
            elif args.command == "stop":
                if not timer.is_active:
                    print("ERROR: no fast is running", file=sys.stderr)
                    return 1
                await timer.stop()
                if not alert.fired:
                    print("Fast saved to history")
                    return 0
            elif args.command == "notes":
                if not timer.is_active:
                    print("ERROR: no fast is running", file=sys.stderr)
                    return 1
                await timer.update_notes(args.text)
            elif args.command == "watch":
                if not timer.is_active:
                    print("No fast is running")
                    return 1
                await _watch(timer)
                return 0
        finally:
            await timer.close()

        if alert.fired:
            return 1
        if timer.is_active:
            state = " (Paused)" if timer.is_paused else ""
            print(f"{timer.display}{state}  started {timer.start_time.astimezone():%b %d, %Y at %I:%M %p}")
        else:
            print("00:00:00  no fast running")
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return 0
    except (TimerApiError, httpx.HTTPError) as e:
        print(f"NETWORK_ERROR: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
