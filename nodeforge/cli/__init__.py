"""nodeforge CLI: Typer-based command-line interface.

Provides the ``nodeforge`` command with subcommands for launching a node
(interactively or offline), printing a bootstrap file's network identity,
inspecting reachability, and fetching a network's bootstrap file.

All output uses Rich for formatted terminal display.
"""
