"""Launch monitor: terminal output for the orchestrator.

Modules
-------
renderer
    ``LaunchRenderer`` prints one status line per phase and a Rich panel
    summarizing the final ``LaunchParameters``.
"""
