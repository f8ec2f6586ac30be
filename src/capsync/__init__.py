"""
capsync -- keep a local cache of capability definitions in step with their source.

Workload and trait definitions are fetched from an authoritative source,
diffed against what is cached locally, and the cache is rewritten to match.
"""

import os

__version__ = "0.1.0"

CAPSYNC_HOME = os.environ.get("CAPSYNC_HOME", "~/.capsync")
