"""Refresh OAuth tokens that are about to expire.

Run once from cron/systemd timers, or keep it running with ``--loop``::

    python -m scripts.refresh_tokens --within-hours 24
    python -m scripts.refresh_tokens --loop --interval-seconds 86400
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import timedelta
from typing import Optional

from app.core.config import get_settings
from app.core.logging import configure_logging
from app.services import OAuthTokenManager, SweepResult

logger = logging.getLogger(__name__)


class TokenRefreshWorker:
    """Run refresh sweeps, optionally on a fixed interval."""

    def __init__(
        self,
        token_manager: OAuthTokenManager,
        within: Optional[timedelta] = None,
        interval_seconds: float = 86400.0,
    ) -> None:
        self._tokens = token_manager
        self._within = within
        self._interval = interval_seconds

    async def run_once(self) -> SweepResult:
        return await self._tokens.sweep_expiring(self._within)

    async def run_forever(self) -> None:
        while True:
            result = await self.run_once()
            print(json.dumps(result.as_dict()), flush=True)
            await asyncio.sleep(self._interval)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Refresh OAuth tokens nearing expiry.")
    parser.add_argument(
        "--within-hours",
        type=float,
        default=None,
        help="Refresh tokens expiring within this many hours "
        "(default: OAUTH_REFRESH_THRESHOLD_HOURS).",
    )
    parser.add_argument(
        "--loop",
        action="store_true",
        help="Keep running, sweeping every --interval-seconds.",
    )
    parser.add_argument(
        "--interval-seconds",
        type=float,
        default=86400.0,
        help="Pause between sweeps in --loop mode (default: one day).",
    )
    return parser


async def main(argv: list[str] | None = None, token_manager: OAuthTokenManager | None = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    if token_manager is None:
        from app.dependencies import get_token_manager

        token_manager = get_token_manager()

    within = timedelta(hours=args.within_hours) if args.within_hours is not None else None
    worker = TokenRefreshWorker(
        token_manager=token_manager,
        within=within,
        interval_seconds=args.interval_seconds,
    )
    if args.loop:
        await worker.run_forever()
        return 0

    result = await worker.run_once()
    print(json.dumps(result.as_dict()))
    return 0


if __name__ == "__main__":  # pragma: no cover - manual execution path
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Token refresh worker stopped")
