"""CLI frontend for arbor.

Commands:
    arbor shell     Open the interactive shell
    arbor profile   List and show connection profiles
    arbor config    Create the config directory

Example:
    $ arbor config init
    $ arbor shell --transport fs --path ./content.json --save-profile local
    $ arbor shell --profile local -c "ls -l /"
"""

from arbor.frontends.cli.main import main

__all__ = ["main"]
