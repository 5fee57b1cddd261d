"""Image lifecycle core: identity, fingerprints, build decisions and cleanup."""

from .cleanup import CleanupPlan, CleanupResult, ImageCleanupPlanner, ImageStatus
from .decision import BuildDecision, BuildDecisionEngine, RebuildReason
from .engine import (
    BuildRequest,
    BuildResult,
    BuildStage,
    ContainerEngine,
    DockerEngine,
    ImageDescriptor,
)
from .exceptions import (
    ConfigError,
    EngineError,
    NotFoundError,
    PartialFailure,
    WsboxError,
)
from .fingerprint import compute_fingerprint
from .remover import ImageRemover, RemovalResult
from .state import WorkspaceIdentity, WorkspaceImageRecord, WorkspaceState
from .tools import ToolSpec, format_tool_list, load_tool_manifest, parse_tool_list

__all__ = [
    # State
    "WorkspaceState",
    "WorkspaceIdentity",
    "WorkspaceImageRecord",
    "compute_fingerprint",
    # Tools
    "ToolSpec",
    "parse_tool_list",
    "format_tool_list",
    "load_tool_manifest",
    # Engine
    "ContainerEngine",
    "DockerEngine",
    "BuildRequest",
    "BuildResult",
    "BuildStage",
    "ImageDescriptor",
    # Decisions
    "BuildDecision",
    "BuildDecisionEngine",
    "RebuildReason",
    # Cleanup
    "ImageCleanupPlanner",
    "CleanupPlan",
    "CleanupResult",
    "ImageStatus",
    "ImageRemover",
    "RemovalResult",
    # Errors
    "WsboxError",
    "ConfigError",
    "NotFoundError",
    "EngineError",
    "PartialFailure",
]
