from __future__ import annotations

import sqlite3
from typing import Optional

from pipelines.runner import RunContext
from services.introduction_lifecycle import IntroductionLifecycle
from utils.timeutil import Clock, utc_now


class ReconcileExpiredRequests:
    """Flip stale PENDING requests to EXPIRED in batches until none remain."""

    def __init__(self, conn: sqlite3.Connection, batch_size: int = 500, max_batches: Optional[int] = None, clock: Clock = utc_now) -> None:
        self.conn = conn
        self.batch_size = batch_size
        self.max_batches = max_batches
        self.clock = clock

    def run(self, ctx: RunContext) -> RunContext:
        lifecycle = IntroductionLifecycle(self.conn, clock=self.clock)
        flipped = 0
        batches = 0
        while self.max_batches is None or batches < self.max_batches:
            count = lifecycle.reconcile_expired(self.batch_size)
            batches += 1
            flipped += count
            if count < self.batch_size:
                break
        ctx.meta["expired_flipped"] = flipped
        ctx.meta["reconcile_batches"] = batches
        return ctx
