"""linkmirror - Link-first directory mirroring for cloud-synced folders.

Mirrors a source tree into a destination folder using one directory
junction per clean subtree and real directories with small-file copies
only where excluded content forces materialization.
"""

__version__ = "0.3.0"
