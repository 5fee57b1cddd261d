"""
Test configuration and fixtures for wsbox tests.

Provides shared fixtures for:
- Settings pointing at a temporary Dockerfile
- An in-memory container engine
- Workspace directories and their state
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from wsbox.config import WsboxSettings
from wsbox.core.engine import (
    BuildRequest,
    BuildResult,
    ContainerEngine,
    ImageDescriptor,
)
from wsbox.core.exceptions import EngineError, NotFoundError
from wsbox.core.state import WorkspaceState


class FakeEngine(ContainerEngine):
    """In-memory engine recording every call."""

    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime.now(timezone.utc)
        self.images: Dict[str, ImageDescriptor] = {}
        self.builds: List[BuildRequest] = []
        self.removed: List[str] = []
        self.remove_calls: List[str] = []
        self.list_calls = 0
        self.fail_builds = False
        self.in_use: set = set()

    def add_image(
        self, repository: str, age: timedelta = timedelta(0), size: str = "1.0GB"
    ) -> ImageDescriptor:
        image = ImageDescriptor(
            repository=repository,
            tag="latest",
            image_id=f"sha256:{abs(hash(repository)) % 10**12:012d}",
            created_at=self.now - age,
            size=size,
        )
        self.images[repository] = image
        return image

    def build(self, request: BuildRequest) -> BuildResult:
        self.builds.append(request)
        if self.fail_builds:
            return BuildResult(success=False, image=request.tag, returncode=1)
        self.add_image(request.tag)
        return BuildResult(success=True, image=request.tag)

    def list_images(self, name_prefix: str) -> List[ImageDescriptor]:
        self.list_calls += 1
        return [
            image
            for name, image in self.images.items()
            if name.startswith(name_prefix)
        ]

    def remove_image(self, reference: str) -> None:
        self.remove_calls.append(reference)
        repository = reference.split(":", 1)[0]
        if repository in self.in_use:
            raise EngineError(f"image {reference} is being used by a running container")
        if repository not in self.images:
            raise NotFoundError(f"Image {reference} not found")
        del self.images[repository]
        self.removed.append(reference)

    def run_container(
        self,
        image: str,
        workspace_dir: Path,
        command: Optional[List[str]] = None,
        interactive: bool = True,
        mount_engine_socket: bool = False,
    ) -> int:
        self.last_run = {
            "image": image,
            "workspace_dir": workspace_dir,
            "command": command,
            "interactive": interactive,
            "mount_engine_socket": mount_engine_socket,
        }
        return 0


@pytest.fixture
def fake_engine() -> FakeEngine:
    """Provide an empty in-memory engine."""
    return FakeEngine()


@pytest.fixture
def dockerfile(tmp_path: Path) -> Path:
    """Provide a minimal two-stage Dockerfile outside the workspace."""
    context = tmp_path / "context"
    context.mkdir()
    path = context / "Dockerfile"
    path.write_text("FROM debian AS base\nFROM ${BASE_IMAGE} AS workspace\n")
    return path


@pytest.fixture
def settings(dockerfile: Path) -> WsboxSettings:
    """Provide settings pointing at the temporary Dockerfile."""
    return WsboxSettings(dockerfile=dockerfile)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Provide an empty workspace directory."""
    path = tmp_path / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def state(workspace: Path, settings: WsboxSettings) -> WorkspaceState:
    """Provide state for the temporary workspace."""
    return WorkspaceState(workspace, settings)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Keep host WSBOX_* settings out of tests."""
    for name in (
        "WSBOX_ENGINE",
        "WSBOX_IMAGE_PREFIX",
        "WSBOX_BASE_IMAGE",
        "WSBOX_DOCKERFILE",
        "WSBOX_TOOL_MANIFEST",
        "WSBOX_CLEANUP_DAYS",
    ):
        monkeypatch.delenv(name, raising=False)
