"""Frontends - user interfaces for arbor.

Submodules:
    cli/    The `arbor` command and its interactive shell
"""
