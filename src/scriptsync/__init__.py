"""scriptsync - Synchronize local source files with a remote script project."""

__version__ = "0.1.0"
