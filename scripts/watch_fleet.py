#!/usr/bin/env python3
"""Watch a Traccar fleet headlessly through a tracking session.

Runs a :class:`~pyjagalari.session.TrackingSession` against an in-memory
map surface and prints the fleet summary and every rendered marker
after each poll.

Usage
-----
Set environment variables and run::

    export TRACCAR_URL="https://demo.traccar.org"
    export TRACCAR_EMAIL="you@example.com"
    export TRACCAR_PASSWORD="your-password"
    python scripts/watch_fleet.py

Options::

    --once               Poll a single time and exit
    --json               Output as machine-readable JSON
    --gpx FILE           Load FILE as the track overlay before polling
    --trails             Draw trail indicators
    --storage FILE       Persist location/track to FILE (default: memory only)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyjagalari import (  # noqa: E402
    InMemorySurface,
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
    TraccarClient,
    TrackerConfig,
    TrackingSession,
)

# ── helpers ──────────────────────────────────────────────────


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _report(session: TrackingSession, surface: InMemorySurface) -> dict[str, Any]:
    summary = session.summary
    markers = []
    for device_id, entry in sorted(session.markers.entries.items()):
        markers.append(
            {
                "device_id": device_id,
                "label": entry.label,
                "category": str(entry.category),
                "online": entry.online,
                "lat": entry.coordinate.lat,
                "lng": entry.coordinate.lng,
            }
        )
    viewport = surface.viewport
    return {
        "timestamp": datetime.now(UTC).isoformat(),
        "last_update": session.last_update.isoformat() if session.last_update else None,
        "auth_error": session.auth_error,
        "summary": {
            "total": summary.total,
            "ambulance": summary.ambulance,
            "motorbike": summary.motorbike,
            "online": summary.online,
            "offline": summary.offline,
        },
        "markers": markers,
        "trails": len(session.trails.entries),
        "track": {"status": str(session.track.status), "filename": session.track_filename},
        "viewport": {
            "center": viewport.center.as_tuple() if viewport.center else None,
            "zoom": viewport.zoom,
        },
    }


def _print_report(report: dict[str, Any]) -> None:
    out: list[str] = [_section(f"FLEET @ {report['timestamp']}")]
    if report["auth_error"]:
        out.append("  !! credentials rejected; showing last good snapshot")
    s = report["summary"]
    out.append(
        f"  total={s['total']} ambulance={s['ambulance']} motorbike={s['motorbike']} "
        f"online={s['online']} offline={s['offline']}"
    )
    out.append(f"  last update : {report['last_update']}")
    out.append(f"  track       : {report['track']['status']} ({report['track']['filename'] or '-'})")
    out.append(f"  trails      : {report['trails']}")
    out.append(f"  viewport    : {report['viewport']['center']} zoom={report['viewport']['zoom']}")
    for marker in report["markers"]:
        state = "online " if marker["online"] else "offline"
        out.append(
            f"    #{marker['device_id']:<5} {state} {marker['category']:<10} "
            f"{marker['lat']:.5f},{marker['lng']:.5f}  {marker['label']}"
        )
    print("\n".join(out))


def _emit(report: dict[str, Any], *, json_mode: bool) -> None:
    if json_mode:
        print(json.dumps(report, default=str, ensure_ascii=False))
    else:
        _print_report(report)


# ── main ─────────────────────────────────────────────────────


async def main() -> None:
    parser = argparse.ArgumentParser(description="Watch a Traccar fleet")
    parser.add_argument("--once", action="store_true", help="Poll once and exit")
    parser.add_argument("--json", dest="json_mode", action="store_true", help="Output as JSON")
    parser.add_argument("--gpx", help="GPX file to load as the track overlay")
    parser.add_argument("--trails", action="store_true", help="Draw trail indicators")
    parser.add_argument("--storage", help="JSON file for durable client storage")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = TrackerConfig.from_env(**({"storage_path": args.storage} if args.storage else {}))
    storage: KeyValueStore = JsonFileStore(config.storage_path) if config.storage_path else MemoryStore()
    surface = InMemorySurface()

    async with TraccarClient(config) as client:
        session = TrackingSession(client, surface, storage, config=config)
        await session.init(start_polling=False)
        try:
            if args.gpx:
                path = Path(args.gpx)
                status = await session.upload_track(path.read_text(encoding="utf-8"), path.name)
                print(f"Track {path.name}: {status}", file=sys.stderr)
            session.set_trails_enabled(args.trails)

            while True:
                await session.poll_once()
                _emit(_report(session, surface), json_mode=args.json_mode)
                if args.once:
                    break
                await asyncio.sleep(config.poll_interval)
        finally:
            await session.dispose()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
