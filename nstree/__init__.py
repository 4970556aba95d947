"""nstree: a pstree-like view of Linux processes and their namespaces."""

__version__ = "0.1.0"
