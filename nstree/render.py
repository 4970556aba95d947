from __future__ import annotations

from typing import Sequence

from .model import NamespaceEntry, ProcInfo
from .nsdiff import changed_namespaces
from .tree import TreeCycleError

BRANCH = "├─"
LAST_BRANCH = "└─"
PIPE = "│ "
BLANK = "  "


def last_kept_index(children: Sequence[ProcInfo]) -> int:
    """Index of the last kept child, or -1. Unkept children may trail."""
    for i in range(len(children) - 1, -1, -1):
        if children[i].keep:
            return i
    return -1


def format_line(
    proc: ProcInfo, prefix: str, is_last: bool, parent: Sequence[NamespaceEntry] | None
) -> str:
    line = f"{prefix}{LAST_BRANCH if is_last else BRANCH}{proc.display_name()}"
    changed = changed_namespaces(proc.namespaces, parent)
    if changed:
        line += " [" + ", ".join(e.identifier for e in changed) + "]"
    return line


def render_tree(root: ProcInfo, parent: Sequence[NamespaceEntry] | None = None) -> list[str]:
    """Render the kept part of the tree below (and including) root.

    Namespaces are only shown where they differ from the parent's.
    """
    lines: list[str] = []
    if root.keep:
        _render(root, "", True, parent, lines, set())
    return lines


def _render(
    proc: ProcInfo,
    prefix: str,
    is_last: bool,
    parent: Sequence[NamespaceEntry] | None,
    lines: list[str],
    path: set[int],
) -> None:
    if id(proc) in path:
        raise TreeCycleError(proc)
    path.add(id(proc))

    lines.append(format_line(proc, prefix, is_last, parent))

    child_prefix = prefix + (BLANK if is_last else PIPE)
    last = last_kept_index(proc.children)
    for i, child in enumerate(proc.children):
        if not child.keep:
            continue
        _render(child, child_prefix, i == last, proc.namespaces, lines, path)

    path.discard(id(proc))
