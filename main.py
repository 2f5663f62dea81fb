# main.py
"""
Entry Point: Flatmate Listing Wizard (CLI)

Purpose
-------
Replay a scripted answers file through the listing wizard and either print
the submission payload (dry run) or send it to the listing service:
  1) Load settings (--config JSON, env overrides) and answers (--answers JSON).
  2) Open a create session, or an edit session hydrated from --edit LISTING_ID.
  3) Walk the nine steps: form fields up front, images on step 6, the
     distance unit on step 7, proximity points on steps 7-9.
  4) Dry run: emit the payload JSON. Otherwise submit and print the result.

Usage
-----
    python main.py --answers answers.json --dry-run
    python main.py --config config.json --answers answers.json
    python main.py --answers answers.json --edit 65f0c2 --out payload.json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from src.core.diagnostics import log_exception
from src.core.media.probe import HttpImageProbe
from src.core.wizard.errors import WIZARD_ERRORS
from src.core.wizard.session import WizardSession
from src.core.wizard.steps import FIRST_PROXIMITY_STEP, IMAGES_STEP, PROXIMITY_STEP_CATEGORIES
from src.inputs.inputs import SettingsLoader, WizardAnswers, WizardSettings
from src.services.listing_client import HttpListingService, ListingService


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Flatmate Listing Wizard: replay answers and submit a listing.")
    p.add_argument("--config", type=str, default=None, help="Path to settings JSON (defaults to ./config.json if present).")
    p.add_argument("--answers", type=str, required=True, help="Path to answers JSON (fields, images, points).")
    p.add_argument("--edit", type=str, default=None, metavar="LISTING_ID", help="Edit an existing listing instead of creating one.")
    p.add_argument("--dry-run", action="store_true", help="Build and print the payload without sending it.")
    p.add_argument("--out", type=str, default=None, help="Write the payload JSON to this path.")
    return p.parse_args(argv)


async def open_session(
    service: ListingService,
    settings: WizardSettings,
    *,
    listing_id: str | None = None,
) -> WizardSession:
    probe = HttpImageProbe(user_agent=settings.user_agent, timeout_s=settings.timeout_s) if settings.probe_images else None
    if listing_id:
        return await WizardSession.open_for_edit(service, listing_id, probe=probe)
    return WizardSession(service, probe=probe)


async def replay_answers(session: WizardSession, answers: WizardAnswers) -> None:
    """Drive the session from step 1 to the last step using the scripted answers."""
    if answers.fields:
        session.set_fields(**answers.fields)

    while True:
        step = session.current_step_id
        if step == IMAGES_STEP:
            for url in answers.images:
                await session.add_image(url)
        if step == FIRST_PROXIMITY_STEP:
            session.set_distance_unit(answers.distance_unit)
        category = PROXIMITY_STEP_CATEGORIES.get(step)
        if category is not None:
            for pt in answers.points:
                if pt.category is category:
                    session.add_point(category, pt.type, pt.distance, name=pt.name or None)
        if session.sequencer.is_last_step:
            return
        session.advance()


def _write_payload(payload: dict[str, Any], out: str | None) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if out:
        Path(out).parent.mkdir(parents=True, exist_ok=True)
        Path(out).write_text(text + "\n", encoding="utf-8")
        print(f"Payload written to {out}")
    else:
        print(text)


async def run(args: argparse.Namespace, service: ListingService | None = None) -> int:
    loader = SettingsLoader()
    settings = loader.load(args.config)
    answers = loader.load_answers(args.answers)
    if service is None:
        service = HttpListingService(settings.api_base_url, timeout_s=settings.timeout_s, user_agent=settings.user_agent)

    session = await open_session(service, settings, listing_id=args.edit)
    try:
        await replay_answers(session, answers)
        if args.dry_run:
            session.submission.validate_all()
            _write_payload(session.build_payload().to_wire(), args.out)
            return 0

        if args.out:
            _write_payload(session.build_payload().to_wire(), args.out)
        result = await session.submit()
        verb = "updated" if result.mode == "edit" else "created"
        print(f"Listing {verb}: {result.listing_id or 'N/A'}")
        return 0
    finally:
        session.close()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        return asyncio.run(run(args))
    except WIZARD_ERRORS as e:
        print(f"Wizard stopped: {e}", file=sys.stderr)
        return 1
    except (FileNotFoundError, ValueError) as e:
        log_exception("Invalid inputs", e)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
