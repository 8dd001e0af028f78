"""SnapVCS - Minimal content-addressed version control.

SnapVCS stores file contents by hash, snapshots the whole object set into
commits, and lists commit history newest first.
"""

__version__ = "0.1.0"
__author__ = "SnapVCS Contributors"

__all__ = ["__version__", "__author__"]
