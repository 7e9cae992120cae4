from __future__ import annotations

from typing import Protocol


class ReachabilityProbePort(Protocol):
    def is_reachable(self, url: str) -> bool:
        ...
