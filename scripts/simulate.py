"""
FlowBlock Simulator — drives a running engine through realistic interactions
(blocklist edits, navigations, temporary breaks, a skipped-through Pomodoro cycle)
so you can watch verdicts and counters change without a browser extension.

Usage:
    # Make sure the engine is running first:
    #   python -m flowblock.main
    # Then in a separate terminal:
    python scripts/simulate.py                     # default: run all scenarios
    python scripts/simulate.py --scenario pomodoro # specific scenario
    python scripts/simulate.py --speed 2.0         # 2× faster
"""

from __future__ import annotations

import argparse
import json
import time
import urllib.error
import urllib.request
from typing import Callable

API = "http://127.0.0.1:8766"


# ---------------------------------------------------------------------------
# Low-level HTTP helpers
# ---------------------------------------------------------------------------

def _request(method: str, path: str, body: dict | None = None) -> dict | None:
    data = json.dumps(body).encode() if body is not None else None
    req = urllib.request.Request(
        f"{API}{path}",
        data=data,
        headers={"Content-Type": "application/json"},
        method=method,
    )
    try:
        with urllib.request.urlopen(req, timeout=3) as r:
            return json.loads(r.read())
    except urllib.error.HTTPError as e:
        return json.loads(e.read() or b"{}")
    except (urllib.error.URLError, OSError) as e:
        print(f"  [!] Engine unreachable: {e}")
        return None


def command(name: str, **payload) -> dict | None:
    return _request("POST", "/commands", {"type": name, "payload": payload})


def navigate(url: str) -> str:
    result = _request("POST", "/navigation/check", {"url": url}) or {}
    return f"{result.get('verdict', '?'):<5}  {result.get('reason', '')}"


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------

def scenario_blocking(speed: float) -> None:
    """Block a few sites, hit them, then take a five minute break on one."""
    for domain in ("facebook.com", "*.reddit.com", "https://www.youtube.com/"):
        site = (command("add_site", domain=domain, category="Simulated") or {}).get("site", {})
        print(f"  + blocked {site.get('domain')}")
        time.sleep(0.3 / speed)

    for url in (
        "https://m.facebook.com/feed",
        "https://old.reddit.com/r/python",
        "https://docs.python.org/3/",
        "https://x.com.evil.com/",
    ):
        print(f"  → {url:<36} {navigate(url)}")
        time.sleep(0.5 / speed)

    grant = command("grant_break", domain="facebook.com", duration_seconds=300) or {}
    print(f"  ☕ break for {grant.get('domain')} until {grant.get('expires_at', 0):.0f}")
    print(f"  → {'https://facebook.com/':<36} {navigate('https://facebook.com/')}")


def scenario_pomodoro(speed: float) -> None:
    """Start a Pomodoro cycle and skip through two full rounds."""
    started = command("start_pomodoro", work_duration=25, break_duration=5, long_break_duration=15)
    if not started:
        return
    print(f"  ▶ focus {started['session']['duration']} min")
    for _ in range(8):
        time.sleep(0.5 / speed)
        result = command("skip_to_next") or {}
        nxt = result.get("next_session", {})
        print(f"  ⏭ {nxt.get('type', '?'):<5} {nxt.get('duration', '?'):>4} min  {result.get('message', '')}")
    command("stop_pomodoro")
    print("  ■ stopped")


def scenario_schedule(speed: float) -> None:
    """Restrict blocking to a window that is not now, then clear it."""
    now = time.localtime()
    day = (now.tm_wday + 1) % 7
    other_day = (day + 3) % 7
    command("add_schedule_slot", day=other_day, start_time="09:00", end_time="17:00")
    command("update_weekly_schedule", enabled=True)
    print(f"  schedule active now? {(command('is_schedule_active') or {}).get('active')}")
    print(f"  → {'https://m.facebook.com/':<36} {navigate('https://m.facebook.com/')}")
    time.sleep(0.5 / speed)
    command("update_weekly_schedule", enabled=False, slots=[])
    print(f"  schedule cleared; active now? {(command('is_schedule_active') or {}).get('active')}")


SCENARIOS: dict[str, Callable[[float], None]] = {
    "blocking": scenario_blocking,
    "pomodoro": scenario_pomodoro,
    "schedule": scenario_schedule,
}


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

def run_scenario(name: str, speed: float) -> None:
    print(f"\n{'─' * 60}")
    print(f"  SCENARIO: {name.upper()}")
    print(f"{'─' * 60}")
    SCENARIOS[name](speed)


def main() -> None:
    parser = argparse.ArgumentParser(description="FlowBlock Simulator")
    parser.add_argument(
        "--scenario",
        choices=list(SCENARIOS.keys()) + ["all"],
        default="all",
        help="Which scenario to run (default: all)",
    )
    parser.add_argument("--speed", type=float, default=1.0, help="Speed multiplier (default 1.0)")
    args = parser.parse_args()

    health = _request("GET", "/health")
    if not health:
        print(f"[!] Cannot reach engine at {API}")
        print("    Start it first: python -m flowblock.main")
        return
    print(f"[✓] Engine connected — FlowBlock v{health.get('version', '?')}")

    sequence = list(SCENARIOS) if args.scenario == "all" else [args.scenario]
    for name in sequence:
        run_scenario(name, args.speed)

    status = _request("GET", "/status") or {}
    stats = status.get("stats", {})
    print(f"\n[✓] Simulation complete. total_blocks={stats.get('total_blocks')}")


if __name__ == "__main__":
    main()
