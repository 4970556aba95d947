from __future__ import annotations

import os
import re
import sys
from pathlib import Path

from .model import NamespaceEntry, ProcInfo, ProcessTable

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def is_linux() -> bool:
    """Return True if running on Linux."""
    return sys.platform.startswith("linux")


def default_proc_root() -> Path:
    """Default procfs mount point, overridable for tests and chroots."""
    env = os.environ.get("NSTREE_PROC_ROOT")
    if env:
        return Path(env)
    return Path("/proc")


def _leading_int(text: str) -> int:
    m = _LEADING_INT.match(text)
    return int(m.group(1)) if m else 0


def parse_stat_line(line: str) -> tuple[int, int, str]:
    """Split a /proc/<pid>/stat line into (pid, ppid, comm).

    comm sits between the first '(' and the last ')' since the name itself
    may contain parentheses. Malformed lines fall back to zero ppid and an
    empty name.
    """
    pid = _leading_int(line)

    lparen = line.find("(")
    rparen = line.rfind(")")
    if lparen < 0 or rparen < 0 or rparen < lparen:
        return pid, 0, ""

    comm = line[lparen + 1 : rparen]
    # "<state> <ppid> ..."
    rest = line[rparen + 1 :].lstrip(" \t")
    ppid = _leading_int(rest[1:]) if rest else 0
    return pid, ppid, comm


def read_namespaces(path: Path) -> tuple[list[NamespaceEntry], bool]:
    """Read <path>/ns/* links. Returns (entries, readable)."""
    ns_dir = path / "ns"
    try:
        names = sorted(os.listdir(ns_dir))
    except OSError:
        return [], False

    entries: list[NamespaceEntry] = []
    for name in names:
        try:
            target = os.readlink(ns_dir / name)
        except OSError:
            return [], False
        entries.append(NamespaceEntry.from_link(target))
    return entries, True


def read_proc_info(stat_path: Path, is_thread: bool = False, owner_pid: int | None = None) -> ProcInfo | None:
    try:
        line = stat_path.read_text(errors="replace").splitlines()[0]
    except (OSError, IndexError):
        # exited while we were scanning
        return None

    pid, ppid, comm = parse_stat_line(line)
    namespaces, readable = read_namespaces(stat_path.parent)

    # Threads hang directly off their owning process, like pstree.
    if is_thread and owner_pid is not None:
        ppid = owner_pid

    return ProcInfo(
        pid=pid,
        ppid=ppid,
        comm=comm,
        is_thread=is_thread,
        namespaces=namespaces,
        namespaces_readable=readable,
    )


def _numeric_entries(path: Path) -> list[str]:
    return sorted((d for d in os.listdir(path) if d.isascii() and d.isdigit()), key=int)


def gather_processes(proc_root: Path | None = None, *, include_threads: bool = False) -> ProcessTable:
    """Collect every process (and optionally thread) under proc_root.

    Listing proc_root itself must succeed; anything below it is best-effort
    per record.
    """
    root = proc_root or default_proc_root()
    table = ProcessTable()

    for d in _numeric_entries(root):
        pid_dir = root / d
        info = read_proc_info(pid_dir / "stat")
        if info is not None:
            table.append(info)

        if not include_threads:
            continue

        try:
            tids = _numeric_entries(pid_dir / "task")
        except OSError:
            continue

        owner = int(d)
        for t in tids:
            if int(t) == owner:
                continue
            thread = read_proc_info(pid_dir / "task" / t / "stat", is_thread=True, owner_pid=owner)
            if thread is not None:
                table.append(thread)

    return table
