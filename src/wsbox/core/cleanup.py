"""
Age based cleanup of workspace images.

Planning is pure: ``plan()`` classifies every workspace image and decides what
to remove. ``execute()`` is the only mutating step and removes images one by
one, recording failures instead of stopping.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from .engine import ContainerEngine, ImageDescriptor
from .exceptions import ConfigError, EngineError, NotFoundError, PartialFailure

if TYPE_CHECKING:
    from ..config import WsboxSettings

log = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400

_SIZE_PATTERN = re.compile(r"^\s*([\d.]+)\s*([kKMGT]?i?B)\s*$")
_SIZE_UNITS = {
    "B": 1,
    "kB": 1000,
    "KB": 1000,
    "MB": 1000**2,
    "GB": 1000**3,
    "TB": 1000**4,
    "KiB": 1024,
    "MiB": 1024**2,
    "GiB": 1024**3,
    "TiB": 1024**4,
}


def parse_size(value: str) -> int:
    """Convert an engine size column (``1.2GB``, ``850MB``) to bytes, 0 if unknown."""
    match = _SIZE_PATTERN.match(value or "")
    if not match or match.group(2) not in _SIZE_UNITS:
        return 0
    return int(float(match.group(1)) * _SIZE_UNITS[match.group(2)])


def format_size(num_bytes: int) -> str:
    size = float(num_bytes)
    for unit in ("B", "kB", "MB", "GB"):
        if size < 1000:
            return f"{size:.0f}{unit}" if unit == "B" else f"{size:.1f}{unit}"
        size /= 1000
    return f"{size:.1f}TB"


class ImageStatus(str, Enum):
    CURRENT = "current"
    RECENT = "recent"
    STALE = "stale"


@dataclass
class ClassifiedImage:
    image: ImageDescriptor
    status: ImageStatus
    age: timedelta

    @property
    def age_days(self) -> float:
        return self.age.total_seconds() / SECONDS_PER_DAY


@dataclass
class CleanupPlan:
    """What a cleanup pass would keep and remove."""

    max_age_days: int
    keep: List[ClassifiedImage] = field(default_factory=list)
    remove: List[ClassifiedImage] = field(default_factory=list)

    @property
    def reclaimable_bytes(self) -> int:
        """Approximate, since layers may be shared between images."""
        return sum(parse_size(item.image.size) for item in self.remove)

    @property
    def reclaimable_size(self) -> str:
        return format_size(self.reclaimable_bytes)


@dataclass
class CleanupResult:
    removed: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def partial(self) -> bool:
        return bool(self.failed)


class ImageCleanupPlanner:
    """Classify workspace images and remove the stale ones."""

    def __init__(
        self,
        engine: ContainerEngine,
        settings: "WsboxSettings",
        current_image: Optional[str] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        """
        Args:
            engine: Container engine
            settings: Naming settings (prefix and base image)
            current_image: Image name of the calling workspace, always kept
            clock: Returns the current time; injectable for tests
        """
        self.engine = engine
        self.settings = settings
        self.current_image = current_image
        self.clock = clock

    def _candidates(self) -> List[ImageDescriptor]:
        prefix = f"{self.settings.image_prefix}-"
        return [
            image
            for image in self.engine.list_images(prefix)
            if image.repository != self.settings.base_image
            and image.repository.startswith(prefix)
        ]

    def classify(self, image: ImageDescriptor, max_age_days: int) -> ClassifiedImage:
        age = self.clock() - image.created_at
        if self.current_image and image.repository == self.current_image:
            status = ImageStatus.CURRENT
        elif age.total_seconds() >= max_age_days * SECONDS_PER_DAY:
            status = ImageStatus.STALE
        else:
            status = ImageStatus.RECENT
        return ClassifiedImage(image=image, status=status, age=age)

    def plan(self, max_age_days: int) -> CleanupPlan:
        """
        Compute which images to remove.

        Args:
            max_age_days: Images at least this many days old are stale

        Raises:
            ConfigError: If max_age_days is negative
        """
        if max_age_days < 0:
            raise ConfigError(f"--older-than must be >= 0, got {max_age_days}")

        plan = CleanupPlan(max_age_days=max_age_days)
        for image in self._candidates():
            item = self.classify(image, max_age_days)
            if item.status is ImageStatus.STALE:
                plan.remove.append(item)
            else:
                plan.keep.append(item)

        log.info(
            f"Cleanup plan: {len(plan.remove)} to remove, {len(plan.keep)} to keep "
            f"(~{plan.reclaimable_size})"
        )
        return plan

    def execute(self, plan: CleanupPlan, strict: bool = False) -> CleanupResult:
        """
        Remove every image in the plan's removal set.

        Each removal is independent; failures are recorded and the pass goes on.

        Args:
            plan: Plan from ``plan()``
            strict: Raise PartialFailure after the pass if anything failed

        Returns:
            CleanupResult with removed references and failure messages
        """
        result = CleanupResult()
        for item in plan.remove:
            reference = item.image.reference
            try:
                self.engine.remove_image(reference)
            except NotFoundError as e:
                log.warning(f"{reference}: not found ({e})")
                result.failed[reference] = "not found"
            except EngineError as e:
                log.warning(f"{reference}: {e}")
                result.failed[reference] = str(e)
            else:
                result.removed.append(reference)

        if strict and result.partial:
            raise PartialFailure(result)
        return result
