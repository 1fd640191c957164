"""
backupkern - incremental hard-link snapshots of a directory tree.

Every run copies the source folder into a new, plain directory under the
destination. Files unchanged since the previous snapshot are hard-linked
instead of copied, so repeated backups stay small and browsable.
"""

__version__ = "0.1.0"
__author__ = "backupkern Contributors"
