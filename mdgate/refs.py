"""Revision resolution for the content source.

The content source advertises its references over git smart-HTTP
(``info/refs?service=git-upload-pack``). The advertisement is a sequence of
pkt-lines: each line starts with a 4-digit hex length that counts the prefix
itself, and ``0000`` is a flush packet. The first reference line carries a
NUL-separated capability list, which may name the branch HEAD points at via
``symref=HEAD:refs/heads/<branch>``.

Key functions:
- parse_pkt_lines: Split a pkt-line stream into payloads.
- parse_advertisement: Extract references and capabilities.
- find_head: Pick the HEAD reference.
- resolve_revision: Query a ContentSource once and pin its HEAD revision.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from .errors import ContentUnavailable, StartupUnresolvable
from .protocols import ContentSource

logger = logging.getLogger("mdgate.refs")

_SHA_RE = re.compile(r"^[0-9a-f]{40}(?:[0-9a-f]{24})?$")
_HEADS_PREFIX = "refs/heads/"


@dataclass(frozen=True)
class Ref:
    """A single advertised reference.

    Attributes:
        sha: Object identifier the reference points at.
        name: Reference name (``HEAD``, ``refs/heads/main``...).
    """

    sha: str
    name: str


@dataclass(frozen=True)
class Revision:
    """Immutable revision the gateway serves content from.

    Attributes:
        sha: Commit identifier.
        branch: Branch HEAD pointed at when resolved, if advertised.
    """

    sha: str
    branch: str | None = None

    def __str__(self) -> str:
        return self.sha


@dataclass
class Advertisement:
    """Parsed reference advertisement."""

    refs: list[Ref] = field(default_factory=list)
    capabilities: list[str] = field(default_factory=list)

    def symref_target(self, name: str = "HEAD") -> str | None:
        """Return the target of a ``symref=<name>:<target>`` capability."""
        prefix = f"symref={name}:"
        for capability in self.capabilities:
            if capability.startswith(prefix):
                return capability[len(prefix) :]
        return None


def parse_pkt_lines(data: bytes) -> list[bytes | None]:
    """Split a pkt-line stream into payloads.

    Args:
        data: Raw response body.

    Returns:
        Payloads in order; flush packets are represented by None.

    Raises:
        ValueError: If a length prefix is malformed or the stream is truncated.
    """
    packets: list[bytes | None] = []
    offset = 0
    while offset < len(data):
        header = data[offset : offset + 4]
        if len(header) < 4:
            raise ValueError(f"Truncated pkt-line header at offset {offset}")
        try:
            length = int(header, 16)
        except ValueError:
            raise ValueError(f"Invalid pkt-line length {header!r}") from None
        if length == 0:
            packets.append(None)
            offset += 4
            continue
        if length < 4:
            raise ValueError(f"Unsupported pkt-line length {length}")
        payload = data[offset + 4 : offset + length]
        if len(payload) != length - 4:
            raise ValueError(f"Truncated pkt-line payload at offset {offset}")
        packets.append(payload)
        offset += length
    return packets


def parse_advertisement(data: bytes) -> Advertisement:
    """Parse a smart-HTTP reference advertisement.

    Args:
        data: Raw ``info/refs`` response body.

    Returns:
        Advertisement with references and the capability list.

    Raises:
        ValueError: If the stream is not a valid advertisement.
    """
    advertisement = Advertisement()
    for payload in parse_pkt_lines(data):
        if payload is None:
            continue
        line = payload.decode("utf-8", errors="replace").rstrip("\n")
        if line.startswith("# service="):
            continue
        if "\0" in line:
            line, caps = line.split("\0", 1)
            advertisement.capabilities.extend(caps.split())
        sha, _, name = line.partition(" ")
        if not _SHA_RE.match(sha) or not name:
            raise ValueError(f"Malformed reference line: {line!r}")
        # Empty repositories advertise a placeholder carrying only capabilities.
        if name == "capabilities^{}":
            continue
        advertisement.refs.append(Ref(sha=sha, name=name))
    return advertisement


def find_head(refs: list[Ref]) -> Ref | None:
    """Return the HEAD reference, or None when it is not advertised."""
    for ref in refs:
        if ref.name == "HEAD":
            return ref
    return None


async def resolve_revision(
    source: ContentSource, repository: str, pinned: str | None = None
) -> Revision:
    """Resolve the revision to serve for the lifetime of the process.

    Args:
        source: Content source to query.
        repository: ``owner/repo`` slug, used in error messages.
        pinned: Explicit commit identifier; skips the network query.

    Returns:
        The resolved Revision.

    Raises:
        StartupUnresolvable: If the advertisement cannot be fetched or parsed,
            or carries no HEAD.
    """
    if pinned:
        logger.info("Using pinned revision %s for %s", pinned, repository)
        return Revision(sha=pinned)
    try:
        body = await source.fetch_refs()
    except ContentUnavailable as exc:
        raise StartupUnresolvable(
            repository, f"could not list references ({exc.message})", exc
        ) from exc
    try:
        advertisement = parse_advertisement(body)
    except ValueError as exc:
        raise StartupUnresolvable(
            repository, f"malformed reference advertisement: {exc}", exc
        ) from exc
    head = find_head(advertisement.refs)
    if head is None:
        raise StartupUnresolvable(repository, "No Git HEAD to be found.")
    target = advertisement.symref_target("HEAD")
    branch = target
    if target and target.startswith(_HEADS_PREFIX):
        branch = target[len(_HEADS_PREFIX) :]
    revision = Revision(sha=head.sha, branch=branch)
    logger.info(
        "Resolved %s HEAD to %s (%s)", repository, revision.sha, branch or "detached"
    )
    return revision
