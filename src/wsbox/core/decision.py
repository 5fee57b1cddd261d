"""
Build decisions for workspace images.

Decides whether a workspace image has to be (re)built and, if so, issues the
build and records the new fingerprint.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Sequence

from .engine import BuildRequest, BuildResult, BuildStage, ContainerEngine
from .exceptions import EngineError
from .fingerprint import compute_fingerprint
from .state import WorkspaceIdentity, WorkspaceState
from .tools import ToolSpec, format_tool_list, load_tool_manifest

if TYPE_CHECKING:
    from ..config import WsboxSettings

log = logging.getLogger(__name__)


class RebuildReason(str, Enum):
    """Why a rebuild was triggered, in precedence order."""

    FORCED = "forced"
    TOOLS_REQUESTED = "tools_requested"
    IMAGE_MISSING = "image_missing"
    DRIFT = "drift"


REASON_MESSAGES = {
    RebuildReason.FORCED: "rebuild requested",
    RebuildReason.TOOLS_REQUESTED: "tool installation requested",
    RebuildReason.IMAGE_MISSING: "no image exists for this workspace",
    RebuildReason.DRIFT: "build inputs changed since the last build",
}


@dataclass
class BuildDecision:
    """Outcome of ``BuildDecisionEngine.decide``."""

    image_name: str
    fingerprint: str
    previous_fingerprint: Optional[str] = None
    reasons: List[RebuildReason] = field(default_factory=list)
    use_cache: bool = True
    tools: List[ToolSpec] = field(default_factory=list)
    tools_from_manifest: bool = False

    @property
    def rebuild(self) -> bool:
        return bool(self.reasons)

    @property
    def reason(self) -> Optional[RebuildReason]:
        """Highest precedence reason, used for diagnostics."""
        return self.reasons[0] if self.reasons else None

    def describe(self) -> str:
        if not self.rebuild:
            return f"Image {self.image_name} is up to date"
        return f"Rebuilding {self.image_name}: {REASON_MESSAGES[self.reason]}"


class BuildDecisionEngine:
    """
    Decide and execute workspace image builds.

    A rebuild happens when any of these hold:
    1. a build was explicitly requested
    2. an explicit tool list was supplied
    3. no image exists under the workspace's name
    4. a previous fingerprint exists and differs from the current one
    """

    def __init__(
        self,
        state: WorkspaceState,
        engine: ContainerEngine,
        settings: "WsboxSettings",
    ):
        self.state = state
        self.engine = engine
        self.settings = settings
        self.identity = WorkspaceIdentity(state)

    def current_fingerprint(self) -> str:
        return compute_fingerprint(self.settings.dockerfile, self.state.tool_manifest)

    def decide(
        self,
        force: bool = False,
        no_cache: bool = False,
        tools: Sequence[ToolSpec] = (),
    ) -> BuildDecision:
        """
        Decide whether the workspace image needs a build.

        Args:
            force: Explicit build/rebuild flag
            no_cache: Bypass the engine's layer cache for any build this decision triggers
            tools: Explicit tools to install

        Returns:
            BuildDecision; ``rebuild`` is False when the image can be reused
        """
        image_name = self.identity.get_or_create()
        decision = BuildDecision(
            image_name=image_name,
            fingerprint=self.current_fingerprint(),
            previous_fingerprint=self.state.load_fingerprint(),
            tools=list(tools),
            use_cache=not no_cache,
        )

        if force:
            decision.reasons.append(RebuildReason.FORCED)

        if decision.tools:
            decision.reasons.append(RebuildReason.TOOLS_REQUESTED)

        if not self.engine.image_exists(image_name):
            decision.reasons.append(RebuildReason.IMAGE_MISSING)
            # Manifest tools are only picked up for a first build
            if not decision.tools:
                decision.tools = load_tool_manifest(self.state.tool_manifest)
                decision.tools_from_manifest = bool(decision.tools)
                if decision.tools_from_manifest:
                    log.info(
                        f"Using tools from {self.state.tool_manifest}: "
                        f"{format_tool_list(decision.tools)}"
                    )
        elif (
            decision.previous_fingerprint is not None
            and decision.previous_fingerprint != decision.fingerprint
        ):
            decision.reasons.append(RebuildReason.DRIFT)

        log.debug(
            f"Decision for {image_name}: reasons={[r.value for r in decision.reasons]} "
            f"fingerprint={decision.previous_fingerprint}->{decision.fingerprint}"
        )
        return decision

    def build_request(self, decision: BuildDecision) -> BuildRequest:
        build_args = {"BASE_IMAGE": self.settings.base_image}
        if decision.tools:
            build_args["INSTALL_TOOLS"] = format_tool_list(decision.tools)

        return BuildRequest(
            tag=decision.image_name,
            dockerfile=self.settings.dockerfile,
            context=self.settings.build_context,
            target_stage=BuildStage.WORKSPACE,
            build_args=build_args,
            use_cache=decision.use_cache,
        )

    def execute(self, decision: BuildDecision) -> BuildResult:
        """
        Build the workspace image and record its fingerprint.

        The fingerprint is only written after a successful build, so a failed
        or interrupted build is retried on the next invocation.

        Raises:
            EngineError: If the build failed
        """
        result = self.engine.build(self.build_request(decision))
        if not result.success:
            raise EngineError(
                f"Failed to build workspace image {decision.image_name}",
                returncode=result.returncode,
                stderr=result.stderr,
            )

        self.state.save_fingerprint(decision.fingerprint)
        return result

    def ensure_base_image(self, force: bool = False) -> bool:
        """
        Build the shared base image if it is missing or ``force`` is set.

        Returns:
            True if a build was performed

        Raises:
            EngineError: If the build failed
        """
        base_image = self.settings.base_image
        if not force and self.engine.image_exists(base_image):
            log.debug(f"Base image {base_image} present")
            return False

        result = self.engine.build(
            BuildRequest(
                tag=base_image,
                dockerfile=self.settings.dockerfile,
                context=self.settings.build_context,
                target_stage=BuildStage.BASE,
            )
        )
        if not result.success:
            raise EngineError(
                f"Failed to build base image {base_image}",
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return True
