"""
Per-workspace persisted state.

Each workspace directory holds two single-line text files: the image name
assigned to the workspace and the fingerprint of its last successful build.
All reads and writes of those files go through ``WorkspaceState``.
"""

import logging
import secrets
import string
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from ..config import WsboxSettings

log = logging.getLogger(__name__)

SUFFIX_LENGTH = 8
SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


@dataclass
class WorkspaceImageRecord:
    """Image identity of one workspace."""

    image_name: str
    fingerprint: Optional[str] = None


class WorkspaceState:
    """Load/save boundary for a workspace's state files."""

    def __init__(self, workspace_dir: Path, settings: "WsboxSettings"):
        self.workspace_dir = Path(workspace_dir)
        self.settings = settings

    @property
    def image_file(self) -> Path:
        return self.workspace_dir / self.settings.image_state_file

    @property
    def fingerprint_file(self) -> Path:
        return self.workspace_dir / self.settings.fingerprint_state_file

    @property
    def tool_manifest(self) -> Path:
        return self.workspace_dir / self.settings.tool_manifest

    @staticmethod
    def _read(path: Path) -> Optional[str]:
        if not path.is_file():
            return None
        value = path.read_text(encoding="utf-8").strip()
        return value or None

    @staticmethod
    def _write(path: Path, value: str) -> None:
        path.write_text(f"{value}\n", encoding="utf-8")

    def load_image_name(self) -> Optional[str]:
        return self._read(self.image_file)

    def save_image_name(self, image_name: str) -> None:
        self._write(self.image_file, image_name)
        log.debug(f"Saved image name {image_name} to {self.image_file}")

    def load_fingerprint(self) -> Optional[str]:
        return self._read(self.fingerprint_file)

    def save_fingerprint(self, fingerprint: str) -> None:
        self._write(self.fingerprint_file, fingerprint)
        log.debug(f"Saved fingerprint {fingerprint} to {self.fingerprint_file}")

    def load_record(self) -> Optional[WorkspaceImageRecord]:
        """Return the workspace record, or None if no image name is persisted."""
        image_name = self.load_image_name()
        if image_name is None:
            return None
        return WorkspaceImageRecord(
            image_name=image_name, fingerprint=self.load_fingerprint()
        )

    def clear(self) -> List[Path]:
        """
        Delete both state files.

        Returns:
            Paths that were actually removed
        """
        removed = []
        for path in (self.image_file, self.fingerprint_file):
            if path.exists():
                path.unlink()
                removed.append(path)
        return removed


class WorkspaceIdentity:
    """Assigns each workspace a stable, unique image name."""

    def __init__(self, state: WorkspaceState):
        self.state = state

    def generate_name(self) -> str:
        suffix = "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
        return f"{self.state.settings.image_prefix}-{suffix}"

    def get_or_create(self) -> str:
        """
        Return the workspace's image name, assigning one on first use.

        The name is written once and then reused across sessions until the
        workspace is explicitly removed.
        """
        image_name = self.state.load_image_name()
        if image_name is not None:
            return image_name

        image_name = self.generate_name()
        self.state.save_image_name(image_name)
        log.info(f"Assigned image {image_name} to {self.state.workspace_dir}")
        return image_name
