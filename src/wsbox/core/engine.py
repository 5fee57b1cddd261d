"""
Container engine operations.

Everything wsbox asks of Docker (or a compatible CLI such as Podman) goes
through ``ContainerEngine``: build, list and remove images, and run containers.
``DockerEngine`` implements it by shelling out to the engine binary.
"""

import logging
import os
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .exceptions import EngineError, NotFoundError

log = logging.getLogger(__name__)

LIST_FORMAT = "{{.Repository}}\t{{.Tag}}\t{{.ID}}\t{{.CreatedAt}}\t{{.Size}}"
DOCKER_SOCKET = "/var/run/docker.sock"
CONTAINER_WORKDIR = "/workspace"


class BuildStage(str, Enum):
    """Dockerfile stages wsbox knows how to build."""

    BASE = "base"
    WORKSPACE = "workspace"


@dataclass
class BuildRequest:
    """Everything the engine needs for one image build."""

    tag: str
    dockerfile: Path
    context: Path
    target_stage: BuildStage = BuildStage.WORKSPACE
    build_args: Dict[str, str] = field(default_factory=dict)
    use_cache: bool = True


@dataclass
class BuildResult:
    """Result of an image build."""

    success: bool
    image: str
    returncode: int = 0
    stderr: Optional[str] = None


@dataclass
class ImageDescriptor:
    """An image as reported by the engine. Never persisted."""

    repository: str
    tag: str
    image_id: str
    created_at: datetime
    size: str

    @property
    def reference(self) -> str:
        """Name to hand back to the engine for removal."""
        if self.tag and self.tag != "<none>":
            return f"{self.repository}:{self.tag}"
        return self.image_id


def parse_created_at(value: str) -> datetime:
    """
    Parse the engine's ``CreatedAt`` column.

    Docker prints ``2024-05-01 10:20:30 +0200 CEST``; Podman adds fractional
    seconds to the time part. The trailing zone abbreviation is ignored.
    """
    parts = value.split()
    if len(parts) < 3:
        raise ValueError(f"Unrecognized timestamp: {value!r}")
    date_part, time_part, offset = parts[:3]
    time_part = time_part.split(".", 1)[0]
    return datetime.strptime(f"{date_part} {time_part} {offset}", "%Y-%m-%d %H:%M:%S %z")


# Docker says "No such image" (older releases "No such object"), Podman "image not known"
MISSING_IMAGE_MARKERS = ("no such image", "no such object", "image not known")


def _is_missing_image(stderr: str) -> bool:
    lowered = stderr.lower()
    return any(marker in lowered for marker in MISSING_IMAGE_MARKERS)


class ContainerEngine(ABC):
    """Engine contract the lifecycle logic depends on."""

    @abstractmethod
    def build(self, request: BuildRequest) -> BuildResult:
        """Build ``request.target_stage`` and tag it ``request.tag``."""

    @abstractmethod
    def list_images(self, name_prefix: str) -> List[ImageDescriptor]:
        """List images whose repository starts with ``name_prefix``."""

    @abstractmethod
    def remove_image(self, reference: str) -> None:
        """
        Remove an image.

        Raises:
            NotFoundError: If the engine has no such image
            EngineError: If removal failed for any other reason (e.g. in use)
        """

    def image_exists(self, name: str) -> bool:
        return any(image.repository == name for image in self.list_images(name))

    @abstractmethod
    def run_container(
        self,
        image: str,
        workspace_dir: Path,
        command: Optional[Sequence[str]] = None,
        interactive: bool = True,
        mount_engine_socket: bool = False,
    ) -> int:
        """Run ``image`` with ``workspace_dir`` mounted and return its exit status."""


class DockerEngine(ContainerEngine):
    """Docker CLI backed engine. Works with any CLI-compatible binary."""

    def __init__(self, binary: str = "docker"):
        self.binary = binary

    def _run(self, args: List[str], capture: bool = True) -> subprocess.CompletedProcess:
        cmd = [self.binary, *args]
        log.debug(f"Running: {' '.join(cmd)}")
        try:
            return subprocess.run(
                cmd,
                capture_output=capture,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise EngineError(
                f"Container engine '{self.binary}' not found on PATH"
            ) from e

    def build(self, request: BuildRequest) -> BuildResult:
        """
        Build an image, streaming engine output to the terminal.

        Args:
            request: Build request

        Returns:
            BuildResult with success status
        """
        args = [
            "build",
            "--target",
            request.target_stage.value,
            "-t",
            request.tag,
            "-f",
            str(request.dockerfile),
        ]
        for name, value in request.build_args.items():
            args += ["--build-arg", f"{name}={value}"]
        if not request.use_cache:
            args.append("--no-cache")
        args.append(str(request.context))

        log.info(f"Building {request.target_stage.value} image: {request.tag}")
        result = self._run(args, capture=False)

        if result.returncode != 0:
            log.error(f"Build of {request.tag} failed (exit {result.returncode})")
            return BuildResult(
                success=False, image=request.tag, returncode=result.returncode
            )

        log.info(f"Image built successfully: {request.tag}")
        return BuildResult(success=True, image=request.tag)

    def list_images(self, name_prefix: str) -> List[ImageDescriptor]:
        result = self._run(
            ["images", "--filter", f"reference={name_prefix}*", "--format", LIST_FORMAT]
        )
        if result.returncode != 0:
            raise EngineError(
                "Failed to list images",
                returncode=result.returncode,
                stderr=result.stderr,
            )

        images = []
        for line in result.stdout.splitlines():
            fields = line.split("\t")
            if len(fields) != 5:
                log.debug(f"Skipping unparseable image line: {line!r}")
                continue
            repository, tag, image_id, created, size = fields
            if not repository.startswith(name_prefix):
                continue
            try:
                created_at = parse_created_at(created)
            except ValueError:
                log.warning(f"Skipping {repository}: cannot parse creation time {created!r}")
                continue
            images.append(
                ImageDescriptor(
                    repository=repository,
                    tag=tag,
                    image_id=image_id,
                    created_at=created_at,
                    size=size,
                )
            )
        return images

    def image_exists(self, name: str) -> bool:
        """
        Check whether the engine has an image called ``name``.

        Raises:
            EngineError: If the engine could not answer (daemon down, no access)
        """
        result = self._run(["image", "inspect", name])
        if result.returncode == 0:
            log.debug(f"Image check for {name}: True")
            return True

        stderr = (result.stderr or "").strip()
        if _is_missing_image(stderr):
            log.debug(f"Image check for {name}: False")
            return False
        raise EngineError(
            f"Failed to inspect image {name}: {stderr or 'unknown error'}",
            returncode=result.returncode,
            stderr=stderr,
        )

    def remove_image(self, reference: str) -> None:
        result = self._run(["rmi", reference])
        if result.returncode == 0:
            log.info(f"Removed image {reference}")
            return

        stderr = (result.stderr or "").strip()
        if _is_missing_image(stderr):
            raise NotFoundError(f"Image {reference} not found")
        raise EngineError(
            f"Failed to remove image {reference}: {stderr or 'unknown error'}",
            returncode=result.returncode,
            stderr=stderr,
        )

    def run_container(
        self,
        image: str,
        workspace_dir: Path,
        command: Optional[Sequence[str]] = None,
        interactive: bool = True,
        mount_engine_socket: bool = False,
    ) -> int:
        """
        Launch a throwaway container with the workspace mounted.

        Blocks until the container exits.

        Returns:
            Container exit status
        """
        args = ["run", "--rm"]
        if interactive:
            args.append("-it")
        args += [
            "-v",
            f"{Path(workspace_dir).resolve()}:{CONTAINER_WORKDIR}",
            "-w",
            CONTAINER_WORKDIR,
            "-e",
            f"HOST_USER_ID={os.getuid()}",
            "-e",
            f"HOST_GROUP_ID={os.getgid()}",
        ]
        if mount_engine_socket:
            args += ["-v", f"{DOCKER_SOCKET}:{DOCKER_SOCKET}"]
        args.append(image)
        if command:
            args += list(command)

        result = self._run(args, capture=False)
        return result.returncode
