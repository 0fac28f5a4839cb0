"""
SSH config model for sshhop
Loads host entries from a configuration source, answers proxy-jump queries
and removes host blocks from the underlying file
"""

import logging
import os
import stat
import tempfile
from typing import List, Optional

from .models import HostBlock, HostEntry, ProxyChain
from .ssh_config_utils import (
    delete_host_block,
    format_block_body,
    get_all_host_blocks,
    get_host_block,
    get_proxy_jump_host,
    join_lines,
    parse_host_entries,
    split_lines,
)

logger = logging.getLogger(__name__)

DEFAULT_FILE_MODE = 0o644
SECTION_RULE = "─" * 20


class ParseError(Exception):
    """The configuration source could not be read."""

    def __init__(self, source, cause: Exception):
        super().__init__(f"{source}: {cause}")
        self.source = source
        self.cause = cause


class ConfigSource:
    """Where the configuration text lives."""

    def read_text(self) -> str:
        raise NotImplementedError

    def write_text(self, text: str) -> None:
        raise NotImplementedError


class FileConfigSource(ConfigSource):
    """A config file on disk, read and written without newline translation."""

    def __init__(self, path: str):
        self.path = os.path.abspath(os.path.expanduser(path))

    def __str__(self):
        return self.path

    def read_text(self) -> str:
        with open(self.path, 'r', encoding='utf-8', errors='surrogateescape', newline='') as f:
            return f.read()

    def write_text(self, text: str) -> None:
        """Replace the file atomically, keeping its permission bits."""
        target = os.path.realpath(self.path)
        try:
            mode = stat.S_IMODE(os.stat(target).st_mode)
        except OSError:
            mode = DEFAULT_FILE_MODE

        fd, tmp_path = tempfile.mkstemp(prefix='.config-', dir=os.path.dirname(target))
        try:
            with os.fdopen(fd, 'w', encoding='utf-8', errors='surrogateescape', newline='') as f:
                f.write(text)
            os.chmod(tmp_path, mode)
            os.replace(tmp_path, target)
        except Exception:
            try:
                os.unlink(tmp_path)
            except OSError:
                logger.debug("Could not remove temporary file %s", tmp_path)
            raise


class TextConfigSource(ConfigSource):
    """In-memory configuration text; writes replace it."""

    def __init__(self, text: str = ""):
        self.text = text

    def __str__(self):
        return "<memory>"

    def read_text(self) -> str:
        return self.text

    def write_text(self, text: str) -> None:
        self.text = text


class ConfigModel:
    """Disposable projection of an SSH client config.

    Every query re-reads the source, so results always reflect the file as it
    is now. ``entries`` is refreshed by :meth:`load` and after each deletion.
    """

    def __init__(self, source: ConfigSource):
        self.source = source
        self.entries: List[HostEntry] = []

    def read_lines(self) -> List[str]:
        try:
            text = self.source.read_text()
        except (OSError, UnicodeError) as exc:
            raise ParseError(self.source, exc) from exc
        return split_lines(text)

    def load(self) -> List[HostEntry]:
        """Re-parse the source and return the host entries."""
        self.entries = parse_host_entries(join_lines(self.read_lines()))
        logger.info("Loaded %d host(s) from %s", len(self.entries), self.source)
        return list(self.entries)

    # ------------------------------------------------------------- queries
    def get_host_block(self, name: str) -> Optional[HostBlock]:
        return get_host_block(self.read_lines(), name)

    def get_all_host_blocks(self) -> List[HostBlock]:
        return get_all_host_blocks(self.read_lines())

    def find_dependents(self, name: str) -> List[HostBlock]:
        """Blocks whose ``ProxyJump`` is exactly *name*, in file order."""
        return self._dependents(self.read_lines(), name)

    @staticmethod
    def _dependents(lines: List[str], name: str) -> List[HostBlock]:
        return [
            block for block in get_all_host_blocks(lines)
            if get_proxy_jump_host(block.raw_lines[1:]) == name
        ]

    def resolve_proxy_chain(self, name: str) -> ProxyChain:
        """Return the host's block, its immediate jump host and its dependents.

        Only one hop is followed: for ``A -> B -> C`` the jump host of ``A``
        is ``B``.
        """
        lines = self.read_lines()
        host = get_host_block(lines, name)
        jump_host = None
        if host is not None:
            jump_name = get_proxy_jump_host(host.raw_lines[1:])
            if jump_name:
                jump_host = get_host_block(lines, jump_name)
        return ProxyChain(
            name=name,
            host=host,
            jump_host=jump_host,
            dependents=tuple(self._dependents(lines, name)),
        )

    def describe_host(self, name: str) -> str:
        """Plain-text summary for the info panel of the host list."""
        try:
            chain = self.resolve_proxy_chain(name)
        except ParseError as exc:
            logger.warning("Unable to describe %s: %s", name, exc)
            return "Error: Could not read SSH config"

        if chain.host is None:
            return f"Host: {name}\n\nNo config found"

        out: List[str] = []
        if chain.jump_host is not None:
            out.append(f"Jump Host: {chain.jump_host.name}")
            out.append(SECTION_RULE)
            out.extend(format_block_body(chain.jump_host))
            out.append("")

        out.append(f"Host: {name}")
        out.append(SECTION_RULE)
        out.extend(format_block_body(chain.host))

        if chain.dependents:
            out.append("")
            out.append("Jumped by:")
            out.append(SECTION_RULE)
            for block in chain.dependents:
                out.append(f"Host: {block.name}")
                out.extend(format_block_body(block))
                out.append("")

        return "\n".join(out) + "\n"

    # ------------------------------------------------------------ mutation
    def delete_host(self, name: str) -> List[HostEntry]:
        """Remove every block listing *name*, persist, and re-parse.

        Raises ``OSError`` if the source cannot be read or written.
        """
        lines = split_lines(self.source.read_text())
        updated = delete_host_block(lines, name)
        if updated == lines:
            logger.info("No host block for %s in %s; nothing to remove", name, self.source)
        else:
            self.source.write_text(join_lines(updated))
            logger.info("Removed host block for %s from %s", name, self.source)
        return self.load()


__all__ = [
    "ConfigModel",
    "ConfigSource",
    "FileConfigSource",
    "ParseError",
    "TextConfigSource",
]
