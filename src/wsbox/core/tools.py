"""
Tool list parsing.

Tools are requested either on the command line as a comma separated list of
``name`` / ``name@version`` tokens, or through an asdf ``.tool-versions``
manifest in the workspace. Both end up as an ordered list of ``ToolSpec``.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

log = logging.getLogger(__name__)

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


@dataclass(frozen=True)
class ToolSpec:
    """A single tool request. ``version=None`` means install latest, unpinned."""

    name: str
    version: Optional[str] = None

    @classmethod
    def parse(cls, token: str) -> "ToolSpec":
        name, sep, version = token.partition("@")
        return cls(name=name, version=version if sep else None)

    @property
    def pinned(self) -> bool:
        return bool(self.version)

    def is_well_formed(self) -> bool:
        if not _NAME_PATTERN.match(self.name):
            return False
        return self.version is None or bool(self.version.strip())

    def __str__(self) -> str:
        if self.version is None:
            return self.name
        return f"{self.name}@{self.version}"


def parse_tool_list(value: Optional[str]) -> List[ToolSpec]:
    """
    Parse a comma separated tool list.

    Blank tokens are dropped. Validation is advisory only: malformed tokens are
    logged and passed through untouched so the installer can report them.

    Args:
        value: Raw CSV string, e.g. ``"python@3.12.8,nodejs"``

    Returns:
        Tools in the order given
    """
    if not value:
        return []

    tools = []
    for token in value.split(","):
        token = token.strip()
        if not token:
            continue
        tool = ToolSpec.parse(token)
        if not tool.is_well_formed():
            log.warning(f"Tool spec '{token}' looks malformed, passing it through")
        tools.append(tool)
    return tools


def format_tool_list(tools: Iterable[ToolSpec]) -> str:
    """Render tools back into the comma separated build-arg form."""
    return ",".join(str(tool) for tool in tools)


def load_tool_manifest(path: Path) -> List[ToolSpec]:
    """
    Read an asdf ``.tool-versions`` file.

    Each non-comment line is ``<name> <version> [fallback versions...]``; only
    the first version is used. A line with a name and no version requests the
    latest release.

    Args:
        path: Manifest path

    Returns:
        Tools in file order, or an empty list if the file does not exist
    """
    if not path.is_file():
        return []

    tools = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.split("#", 1)[0].strip()
        if not line:
            continue
        parts = line.split()
        version = parts[1] if len(parts) > 1 else None
        tools.append(ToolSpec(name=parts[0], version=version))

    log.debug(f"Loaded {len(tools)} tool(s) from {path}")
    return tools
