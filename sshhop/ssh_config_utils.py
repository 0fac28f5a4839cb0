"""Text-level helpers for the subset of the OpenSSH client config grammar we use.

Everything here works on plain strings or lists of lines so it can be
exercised without touching the filesystem. Lines are always split on ``"\\n"``
and joined back the same way; carriage returns, comments, blank lines and
unknown directives are carried through untouched.
"""

import logging
from typing import List, Optional, Sequence

from .models import HostBlock, HostEntry

logger = logging.getLogger(__name__)

WILDCARD_CHARS = frozenset("*?[]!")


def split_lines(text: str) -> List[str]:
    return text.split("\n")


def join_lines(lines: Sequence[str]) -> str:
    return "\n".join(lines)


def is_wildcard_alias(alias: str) -> bool:
    """Return True if *alias* is a pattern rather than a concrete host name."""
    return any(ch in WILDCARD_CHARS for ch in alias)


def is_host_directive(line: str) -> bool:
    return line.strip().lower().startswith("host ")


def host_aliases(line: str) -> List[str]:
    """Return the tokens following the ``Host`` keyword on *line*."""
    return line.split()[1:]


def _is_blank(line: str) -> bool:
    return not line.rstrip("\r")


def _is_indented(line: str) -> bool:
    return line.startswith((" ", "\t"))


def is_top_level(line: str) -> bool:
    """A non-empty line that does not start with a space or a tab."""
    return not _is_blank(line) and not _is_indented(line)


def _ends_block(line: str) -> bool:
    return is_host_directive(line) or is_top_level(line)


def _format_hint(hostname: str, user: str) -> str:
    if hostname and user:
        return f"{user}@{hostname}"
    return hostname


def parse_host_entries(text: str) -> List[HostEntry]:
    """Return one :class:`HostEntry` per concrete alias, in file order.

    Wildcard aliases are skipped but their blocks still swallow the directives
    that follow them. Within a block the first ``Hostname`` and the first
    ``User`` win. Malformed lines are ignored.
    """
    entries: List[HostEntry] = []
    current_hosts: List[str] = []
    hostname = ""
    user = ""

    def flush():
        hint = _format_hint(hostname, user)
        for alias in current_hosts:
            if is_wildcard_alias(alias):
                continue
            entries.append(HostEntry(name=alias, display_hint=hint))

    for raw_line in split_lines(text):
        line = raw_line.strip()
        lowered = line.lower()
        if lowered.startswith("host "):
            flush()
            current_hosts = host_aliases(line)
            hostname = ""
            user = ""
            continue
        if not current_hosts:
            continue
        if lowered.startswith("hostname ") and not hostname:
            parts = line.split()
            if len(parts) > 1:
                hostname = parts[1]
        elif lowered.startswith("user ") and not user:
            parts = line.split()
            if len(parts) > 1:
                user = parts[1]

    flush()
    logger.debug("Parsed %d host entries", len(entries))
    return entries


def get_host_block(lines: Sequence[str], name: str) -> Optional[HostBlock]:
    """Return the first block whose ``Host`` line lists *name* exactly."""
    collected: Optional[List[str]] = None
    aliases: List[str] = []
    for line in lines:
        if collected is None:
            if is_host_directive(line) and name in host_aliases(line):
                aliases = host_aliases(line)
                collected = [line]
            continue
        if _ends_block(line):
            break
        collected.append(line)

    if collected is None:
        return None
    return HostBlock(name=name, aliases=tuple(aliases), raw_lines=tuple(collected))


def get_all_host_blocks(lines: Sequence[str]) -> List[HostBlock]:
    """Split *lines* into one block per ``Host`` directive, in file order."""
    blocks: List[HostBlock] = []
    aliases: List[str] = []
    current: Optional[List[str]] = None

    def flush():
        if current is not None:
            blocks.append(HostBlock(name=aliases[0], aliases=tuple(aliases), raw_lines=tuple(current)))

    for line in lines:
        if is_host_directive(line):
            flush()
            aliases = host_aliases(line)
            current = [line]
            continue
        if current is None:
            continue
        if is_top_level(line):
            flush()
            current = None
        else:
            current.append(line)

    flush()
    return blocks


def get_proxy_jump_host(lines: Sequence[str]) -> str:
    """Return the first ``ProxyJump`` value found in *lines*, or ``""``."""
    for line in lines:
        stripped = line.strip()
        if stripped.lower().startswith("proxyjump "):
            parts = stripped.split()
            if len(parts) > 1:
                return parts[1]
    return ""


def delete_host_block(lines: Sequence[str], name: str) -> List[str]:
    """Return *lines* without any block whose ``Host`` line lists *name*.

    The whole block goes, including sibling aliases on the same ``Host`` line.
    The top-level line that ends a removed block is kept. Unknown names leave
    the input unchanged.
    """
    output: List[str] = []
    skipping = False
    for line in lines:
        if is_host_directive(line):
            if name in host_aliases(line):
                logger.debug("Dropping block %r for %s", line.strip(), name)
                skipping = True
                continue
            skipping = False
            output.append(line)
            continue
        if skipping:
            if is_top_level(line):
                skipping = False
                output.append(line)
            continue
        output.append(line)

    # Keep the final newline when the last block was the one removed
    if lines and lines[-1] == "" and (not output or output[-1] != ""):
        output.append("")
    return output


def format_block_body(block: HostBlock) -> List[str]:
    """Lines of *block* worth showing: no ``Host`` line, no blank lines."""
    return [line.rstrip("\r") for line in block.raw_lines[1:] if line.strip()]


__all__ = [
    "WILDCARD_CHARS",
    "delete_host_block",
    "format_block_body",
    "get_all_host_blocks",
    "get_host_block",
    "get_proxy_jump_host",
    "host_aliases",
    "is_host_directive",
    "is_top_level",
    "is_wildcard_alias",
    "join_lines",
    "parse_host_entries",
    "split_lines",
]
