"""
Tool Registry

Per-agent keyed container of tools. The registry is read on every dispatch
and written only by explicit register/deregister calls.

Concurrency: copy-on-write. Writers build a new mapping under a lock and
publish it with a single reference assignment; readers take the current
mapping without locking. A lookup therefore sees a tool fully or not at
all.
"""

import threading
from collections.abc import Iterator
from types import MappingProxyType
from typing import Mapping

import structlog

from agentdock.core.interfaces.tools import ToolProtocol


class ToolRegistry:
    """Keyed, copy-on-write container of ToolProtocol instances."""

    def __init__(self, owner: str = "") -> None:
        self._tools: Mapping[str, ToolProtocol] = MappingProxyType({})
        self._write_lock = threading.Lock()
        self.logger = structlog.get_logger().bind(component="tool_registry", owner=owner)

    def register(self, key: str, tool: ToolProtocol) -> None:
        """Add or replace the tool stored under ``key``."""
        with self._write_lock:
            updated = dict(self._tools)
            updated[key] = tool
            self._tools = MappingProxyType(updated)
        self.logger.info("tool_registered", key=key, tool=tool.name, kind=tool.kind)

    def deregister(self, key: str) -> bool:
        """Remove the tool stored under ``key``; False if it was not registered."""
        with self._write_lock:
            if key not in self._tools:
                self.logger.warning("tool_not_registered", key=key)
                return False
            updated = dict(self._tools)
            del updated[key]
            self._tools = MappingProxyType(updated)
        self.logger.info("tool_deregistered", key=key)
        return True

    def snapshot(self) -> Mapping[str, ToolProtocol]:
        """Current immutable view of the registry."""
        return self._tools

    def get(self, key: str) -> ToolProtocol | None:
        return self._tools.get(key)

    def resolve(self, token: str) -> ToolProtocol | None:
        """
        Find the tool whose configured name equals ``token`` ignoring case.

        Matching is on the tool's own identifier, not on the registry key.
        """
        wanted = token.strip().lower()
        for tool in self._tools.values():
            if tool.name.lower() == wanted:
                return tool
        return None

    def find_by_kind(self, kind: str) -> ToolProtocol | None:
        """First registered tool of the given kind."""
        for tool in self._tools.values():
            if tool.kind == kind:
                return tool
        return None

    def keys(self) -> list[str]:
        return list(self._tools.keys())

    def __contains__(self, key: object) -> bool:
        return key in self._tools

    def __iter__(self) -> Iterator[str]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)
