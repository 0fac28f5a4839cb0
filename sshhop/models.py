"""Value types shared by the config model, the session controller and the TUI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class HostEntry:
    """One selectable row in the host list."""

    name: str
    display_hint: str = ""


@dataclass(frozen=True)
class HostBlock:
    """A ``Host`` directive together with the raw lines that belong to it."""

    name: str
    aliases: Tuple[str, ...]
    raw_lines: Tuple[str, ...]

    def directive(self, keyword: str) -> str:
        """Return the first value of *keyword* inside the block, or ``""``."""
        prefix = keyword.lower() + " "
        for line in self.raw_lines[1:]:
            stripped = line.strip()
            if stripped.lower().startswith(prefix):
                parts = stripped.split()
                if len(parts) > 1:
                    return parts[1]
        return ""

    @property
    def hostname(self) -> str:
        return self.directive("hostname")

    @property
    def user(self) -> str:
        return self.directive("user")

    @property
    def proxy_jump(self) -> str:
        return self.directive("proxyjump")


@dataclass(frozen=True)
class ProxyChain:
    """Immediate proxy-jump neighbourhood of a host (one hop each way)."""

    name: str
    host: Optional[HostBlock] = None
    jump_host: Optional[HostBlock] = None
    dependents: Tuple[HostBlock, ...] = ()


__all__ = ["HostEntry", "HostBlock", "ProxyChain"]
