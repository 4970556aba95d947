from __future__ import annotations

from collections import defaultdict
from typing import Sequence

from .model import NamespaceEntry, ProcInfo, ProcessTable
from .nsdiff import qualifies


class TreeCycleError(RuntimeError):
    """The ppid links loop back onto a record already on the current path."""

    def __init__(self, proc: ProcInfo) -> None:
        super().__init__(f"process tree contains a cycle at {proc.comm}({proc.pid})")
        self.proc = proc


def build_tree(table: ProcessTable) -> None:
    """Link every record into its parent's children list via ppid.

    Only non-thread records can be parents. Children keep table order.
    """
    parents: dict[int, ProcInfo] = {}
    for p in table:
        p.children = []
        if not p.is_thread:
            parents.setdefault(p.pid, p)

    members: dict[int, list[ProcInfo]] = defaultdict(list)
    for p in table:
        members[p.ppid].append(p)

    for pid, parent in parents.items():
        parent.children = [c for c in members.get(pid, []) if c is not parent]


def propagate_keep(
    proc: ProcInfo,
    filters: Sequence[str],
    parent: Sequence[NamespaceEntry] | None = None,
    _path: set[int] | None = None,
) -> bool:
    """Set keep on proc and its whole subtree; return proc.keep.

    A node is kept if it matches the filters itself or if anything below it
    is kept, so kept nodes always stay connected to the root.
    """
    path = _path if _path is not None else set()
    if id(proc) in path:
        raise TreeCycleError(proc)
    path.add(id(proc))

    own = qualifies(proc, parent, filters)
    proc.keep = own

    any_child = False
    for child in proc.children:
        # every child is visited so its flag is always set
        if propagate_keep(child, filters, proc.namespaces, path):
            any_child = True

    proc.keep = own or any_child
    path.discard(id(proc))
    return proc.keep
