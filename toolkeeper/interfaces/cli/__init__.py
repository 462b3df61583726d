"""CLI entry point for ToolKeeper.

``toolkeeper`` (or ``python -m toolkeeper.interfaces.cli``) loads settings,
configures logging and runs the startup sequence until the server stops.
"""
