"""Removal of a workspace's image and persisted state."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .engine import ContainerEngine
from .exceptions import EngineError, NotFoundError
from .state import WorkspaceState

log = logging.getLogger(__name__)


@dataclass
class RemovalResult:
    image_name: str
    image_removed: bool
    cleared_files: List[Path] = field(default_factory=list)


class ImageRemover:
    """Delete the current image of a workspace and forget it."""

    def __init__(self, state: WorkspaceState, engine: ContainerEngine):
        self.state = state
        self.engine = engine

    def remove_workspace(self) -> RemovalResult:
        """
        Remove the workspace image, then both state files.

        A missing image is only a warning. State files are deleted even when the
        engine refuses to remove the image; the engine error is re-raised
        afterwards.

        Raises:
            NotFoundError: If the workspace has no image record
            EngineError: If the engine failed to remove an existing image
        """
        record = self.state.load_record()
        if record is None:
            raise NotFoundError(f"No wsbox image recorded for {self.state.workspace_dir}")

        image_removed = False
        failure: Optional[EngineError] = None
        try:
            self.engine.remove_image(record.image_name)
            image_removed = True
        except NotFoundError:
            log.warning(f"Image {record.image_name} was already gone")
        except EngineError as e:
            failure = e
        finally:
            cleared = self.state.clear()

        if failure is not None:
            raise failure

        return RemovalResult(
            image_name=record.image_name,
            image_removed=image_removed,
            cleared_files=cleared,
        )
