"""
Tessera CLI.

Usage:
    tessera config
    tessera provision
    tessera issue <user-id>
    tessera whoami <ticket>
    tessera token <ticket>
    tessera exchange <token>

Every command builds a fresh manager from the resolved configuration, so
with the memory backend state lasts for one invocation only.
"""

__version__ = "0.1.0"
__cli_name__ = "tessera"
