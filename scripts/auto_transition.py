#!/usr/bin/env python3
# This project was developed with assistance from AI tools.
"""Run the policy auto-transition sweep once (cron entry point).

Moves COLLECTING_INFO policies whose actors are all complete into
UNDER_INVESTIGATION and expires ACTIVE policies past their end date.

Usage:
  ./scripts/auto_transition.py                              # in-process, uses DATABASE_URL
  ./scripts/auto_transition.py --url http://localhost:8000  # through the admin API
  ./scripts/auto_transition.py --url ... --token "$JWT"
"""

import argparse
import asyncio
import json
import logging
import sys

import httpx

logger = logging.getLogger("auto_transition")


async def run_in_process() -> dict:
    from db import SessionLocal
    from db.database import db_service
    from src.services.workflow import auto_transition_policies

    try:
        async with SessionLocal() as session:
            result = await auto_transition_policies(session)
    finally:
        await db_service.close()
    return result.model_dump()


async def run_via_api(base_url: str, token: str | None) -> dict:
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    async with httpx.AsyncClient(base_url=base_url, timeout=60) as client:
        response = await client.post("/api/admin/auto-transitions", headers=headers)
        response.raise_for_status()
        return response.json()


async def main() -> int:
    parser = argparse.ArgumentParser(description="Policy auto-transition sweep")
    parser.add_argument("--url", help="API base URL; omit to run against the database directly")
    parser.add_argument("--token", help="Bearer token for the admin API")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        if args.url:
            result = await run_via_api(args.url, args.token)
        else:
            result = await run_in_process()
    except httpx.HTTPError as exc:
        logger.error("Sweep request failed: %s", exc)
        return 1

    print(json.dumps(result, indent=2))
    return 1 if result.get("failed_policy_ids") else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
