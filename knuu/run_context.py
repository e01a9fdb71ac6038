"""
Run-scoped identifiers.

Every instance created during one test run carries the same run identifier
and start time in its labels. The values are built once at process start and
handed to the components that label resources.
"""

from dataclasses import dataclass
from functools import lru_cache
from datetime import datetime, timezone
from typing import Optional
import uuid

from .exceptions import IdentityGenerationError

START_TIME_FORMAT = "%Y%m%dT%H%M%S"


@dataclass(frozen=True)
class RunContext:
    """
    Immutable identifiers of the current test run.

    Attributes:
        identifier: Unique id of the run (used as the test-run-id label)
        start_time: Run start timestamp (used as the test-started label)
    """

    identifier: str
    start_time: str

    @classmethod
    def create(cls, now: Optional[datetime] = None) -> "RunContext":
        """
        Build the run context for a new test run.

        Args:
            now: Start time override (default: current UTC time)

        Returns:
            RunContext with identifier "<timestamp>_<uuid prefix>"

        Raises:
            IdentityGenerationError: If the random source fails
        """
        now = now or datetime.now(timezone.utc)
        start_time = now.strftime(START_TIME_FORMAT)
        try:
            suffix = str(uuid.uuid4())[:8]
        except (OSError, NotImplementedError) as e:
            raise IdentityGenerationError(f"error generating run identifier: {e}") from e
        return cls(identifier=f"{start_time}_{suffix}", start_time=start_time)


@lru_cache()
def get_run_context() -> RunContext:
    """Get the run context of this process, created on first use."""
    return RunContext.create()
