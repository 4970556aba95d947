"""Parent-relative namespace comparison and the filters built on top of it.

A ``parent`` of ``None`` means there is no parent to compare against (the
top of the tree): every namespace the process has counts as changed.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from .model import NamespaceEntry, ProcInfo

WILDCARD = "*"

KNOWN_TYPES = ("cgroup", "ipc", "mnt", "net", "pid", "time", "user", "uts")


def known_types() -> tuple[str, ...]:
    return KNOWN_TYPES


def lookup(entries: Sequence[NamespaceEntry], ns_type: str) -> str | None:
    """Identifier of the first entry of ns_type, or None."""
    for e in entries:
        if e.type == ns_type:
            return e.identifier
    return None


def differs(entry: NamespaceEntry, parent: Sequence[NamespaceEntry] | None) -> bool:
    if parent is None:
        return True
    found = lookup(parent, entry.type)
    return found is None or found != entry.identifier


def changed_namespaces(
    entries: Sequence[NamespaceEntry], parent: Sequence[NamespaceEntry] | None
) -> list[NamespaceEntry]:
    return [e for e in entries if differs(e, parent)]


def qualifies(proc: ProcInfo, parent: Sequence[NamespaceEntry] | None, filters: Sequence[str]) -> bool:
    """Does proc itself match any of the filters?

    No filters means everything matches. A named type the process has no
    entry for contributes nothing.
    """
    if not filters:
        return True

    for f in filters:
        if f == WILDCARD:
            if any(differs(e, parent) for e in proc.namespaces):
                return True
            continue

        own = next((e for e in proc.namespaces if e.type == f), None)
        if own is not None and differs(own, parent):
            return True

    return False


def normalize_filters(values: Iterable[str] | None) -> list[str]:
    """Flatten "-f net -f mnt,uts" style input into ["net", "mnt", "uts"]."""
    out: list[str] = []
    for v in values or []:
        for part in v.split(","):
            part = part.strip()
            if part and part not in out:
                out.append(part)
    return out
