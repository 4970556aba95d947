from __future__ import annotations

import os
from pathlib import Path

import pytest

from nstree.model import NamespaceEntry, ProcInfo

HOST = {
    "net": "net:[4026531840]",
    "mnt": "mnt:[4026531841]",
    "pid": "pid:[4026531836]",
    "uts": "uts:[4026531838]",
}


def ns(mapping: dict[str, str]) -> list[NamespaceEntry]:
    return [NamespaceEntry(type=t, identifier=i) for t, i in mapping.items()]


def proc(pid: int, ppid: int, comm: str, namespaces: dict[str, str] | None = None, **kw) -> ProcInfo:
    return ProcInfo(pid=pid, ppid=ppid, comm=comm, namespaces=ns(namespaces if namespaces is not None else HOST), **kw)


def write_task(task_dir: Path, pid: int, ppid: int, comm: str, namespaces: dict[str, str] | None) -> None:
    task_dir.mkdir(parents=True, exist_ok=True)
    (task_dir / "stat").write_text(f"{pid} ({comm}) S {ppid} {pid} {pid} 0 -1 4194560 100 0 0 0\n")
    if namespaces is None:
        return
    ns_dir = task_dir / "ns"
    ns_dir.mkdir()
    for t, ident in namespaces.items():
        os.symlink(ident, ns_dir / t)


class FakeProc:
    """Builds a minimal procfs layout: <pid>/stat, <pid>/ns/*, <pid>/task/<tid>/..."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def add(
        self,
        pid: int,
        ppid: int,
        comm: str,
        namespaces: dict[str, str] | None = HOST,
        threads: dict[int, str] | None = None,
    ) -> None:
        pid_dir = self.root / str(pid)
        write_task(pid_dir, pid, ppid, comm, namespaces)
        write_task(pid_dir / "task" / str(pid), pid, ppid, comm, namespaces)
        for tid, tcomm in (threads or {}).items():
            # kernel reports the process' parent for threads too
            write_task(pid_dir / "task" / str(tid), tid, ppid, tcomm, namespaces)


@pytest.fixture
def fake_proc(tmp_path: Path) -> FakeProc:
    root = tmp_path / "proc"
    root.mkdir()
    (root / "self").mkdir()
    (root / "meminfo").write_text("MemTotal: 1 kB\n")
    return FakeProc(root)
