from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

UNREADABLE_MARK = "*"


@dataclass(frozen=True)
class NamespaceEntry:
    """One namespace link of a process, e.g. type "net", identifier "net:[4026531840]"."""

    type: str
    identifier: str

    @classmethod
    def from_link(cls, target: str) -> NamespaceEntry:
        ns_type, sep, _ = target.partition(":")
        return cls(type=ns_type if sep else target, identifier=target)


@dataclass(eq=False)
class ProcInfo:
    pid: int
    ppid: int
    comm: str
    is_thread: bool = False
    namespaces: list[NamespaceEntry] = field(default_factory=list)
    namespaces_readable: bool = True
    children: list[ProcInfo] = field(default_factory=list, repr=False)
    keep: bool = True

    @property
    def key(self) -> tuple[int, bool]:
        return (self.pid, self.is_thread)

    def display_name(self) -> str:
        name = f"{{{self.comm}}}" if self.is_thread else self.comm
        mark = "" if self.namespaces_readable else UNREADABLE_MARK
        return f"{name}({self.pid}){mark}"


class ProcessTable:
    """Owns every ProcInfo discovered in one run.

    Child lists only reference records held here. close() drops the child
    lists first and then the records; use the table as a context manager so
    that happens on every exit path.
    """

    def __init__(self, procs: list[ProcInfo] | None = None) -> None:
        self._procs: list[ProcInfo] = list(procs or [])

    def append(self, proc: ProcInfo) -> None:
        self._procs.append(proc)

    def __iter__(self) -> Iterator[ProcInfo]:
        return iter(self._procs)

    def __len__(self) -> int:
        return len(self._procs)

    def root(self) -> ProcInfo | None:
        for p in self._procs:
            if p.pid == 1 and not p.is_thread:
                return p
        return None

    def any_unreadable(self) -> bool:
        return any(not p.namespaces_readable for p in self._procs)

    def close(self) -> None:
        for p in self._procs:
            p.children = []
        self._procs = []

    def __enter__(self) -> ProcessTable:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
