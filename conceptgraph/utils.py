"""
Utility helpers for the concept graph engine.

Provides:
- Structured logging configuration with timestamps.
- Wall-clock timing of named steps.
- Estimated-time parsing and formatting.
- Sorting, filtering, and formatting helpers over concept records.
"""

import contextlib
import logging
import re
import time
from typing import TYPE_CHECKING, Generator, Iterable, List, Optional, Sequence, Union

from conceptgraph.models import LAYER_NAMES, LAYER_ORDER, Concept

if TYPE_CHECKING:
    from conceptgraph.query import GraphQuery

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def setup_logging(
    level: Union[int, str] = logging.INFO,
    fmt: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt: str = "%Y-%m-%dT%H:%M:%S%z",
) -> None:
    """Configure the root logger with timestamped structured output.

    *level* accepts a number or a name such as ``EngineSettings.log_level``.
    """
    logging.basicConfig(level=level, format=fmt, datefmt=datefmt, force=True)


@contextlib.contextmanager
def timed(label: str) -> Generator[None, None, None]:
    """Context manager that logs elapsed wall-clock time for *label*."""
    t0 = time.monotonic()
    yield
    elapsed = time.monotonic() - t0
    logger.info("%s completed in %.3fs.", label, elapsed)


# ---------------------------------------------------------------------------
# Estimated time
# ---------------------------------------------------------------------------

_HOURS_RE = re.compile(r"(?<![\d.])(\d+(?:\.\d+)?)\s*(?:hours?|hrs?)\b", re.IGNORECASE)
_MINUTES_RE = re.compile(r"(?<![\d.])(\d+)\s*min", re.IGNORECASE)


def parse_estimated_time(text: Optional[str]) -> Optional[int]:
    """Parse ``"10 mins"``, ``"1.5 hours"``, ``"1 hour 30 mins"`` into minutes.

    Returns ``None`` when *text* carries no recognisable hour or minute
    component.
    """
    if not text:
        return None
    hours = _HOURS_RE.search(text)
    minutes = _MINUTES_RE.search(text)
    if hours is None and minutes is None:
        return None
    total = 0
    if hours:
        total += round(float(hours.group(1)) * 60)
    if minutes:
        total += int(minutes.group(1))
    return total


def format_minutes(total_minutes: int) -> str:
    """Format minutes as ``"45 mins"``, ``"2 hours"`` or ``"1 hour 30 mins"``."""
    hours, mins = divmod(total_minutes, 60)
    if hours == 0:
        return f"{mins} mins"
    hour_part = f"{hours} hour{'s' if hours > 1 else ''}"
    if mins == 0:
        return hour_part
    return f"{hour_part} {mins} mins"


# ---------------------------------------------------------------------------
# Sorting & filtering
# ---------------------------------------------------------------------------


def layer_rank(layer: str) -> int:
    """Position of *layer* in the layer ordering; unknown layers sort last."""
    try:
        return LAYER_ORDER.index(layer)
    except ValueError:
        return len(LAYER_ORDER)


def sort_by_layer(concepts: Iterable[Concept]) -> List[Concept]:
    return sorted(concepts, key=lambda c: layer_rank(c.layer))


def sort_by_difficulty(concepts: Iterable[Concept]) -> List[Concept]:
    return sorted(concepts, key=lambda c: c.metadata.difficulty)


def sort_by_depth(concepts: Iterable[Concept], query: "GraphQuery") -> List[Concept]:
    """Stable sort by longest prerequisite chain, shallowest first."""
    concepts = list(concepts)
    depths = {c.id: query.get_concept_depth(c.id) for c in concepts}
    return sorted(concepts, key=lambda c: depths[c.id])


def filter_by_difficulty(concepts: Iterable[Concept], max_difficulty: int) -> List[Concept]:
    return [c for c in concepts if c.metadata.difficulty <= max_difficulty]


def filter_advanced(concepts: Iterable[Concept], include_advanced: bool = True) -> List[Concept]:
    return [c for c in concepts if include_advanced or not c.metadata.is_advanced]


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def get_layer_name(layer: str) -> str:
    """Human-readable layer name, falling back to the raw value."""
    return LAYER_NAMES.get(layer, layer)


def format_concept_list(concepts: Sequence[Concept]) -> str:
    """Join concept names as prose: ``"A"``, ``"A and B"``, ``"A, B, and C"``."""
    names = [c.name for c in concepts]
    if not names:
        return "None"
    if len(names) == 1:
        return names[0]
    if len(names) == 2:
        return f"{names[0]} and {names[1]}"
    return f"{', '.join(names[:-1])}, and {names[-1]}"
