from __future__ import annotations

import uuid
from dataclasses import dataclass


def generate_execution_id() -> str:
    """Return a fresh UUID4 execution identifier (lowercase 8-4-4-4-12 hex)."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class RequestContext:
    """Context bound to one logical unit of work (a request or a job run)."""

    execution_id: str

    @classmethod
    def new(cls) -> RequestContext:
        return cls(execution_id=generate_execution_id())
