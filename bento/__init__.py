"""Bento: a WordPress plugin asset bundler.

Discovers scripts and stylesheets under named entry directories, writes
a readable and a minified build of each, and keeps ``manifest.json``
mapping every source path to its pair of built files. Watch mode
rebuilds single files as they change.
"""

__version__ = "1.0.0"
__description__ = "A custom bundler specifically designed for WordPress plugins"

from bento.core.orchestrator import Orchestrator
from bento.core.watcher import WatchController
from bento.cli.app import app as cli

__all__ = ["Orchestrator", "WatchController", "cli", "__version__"]
