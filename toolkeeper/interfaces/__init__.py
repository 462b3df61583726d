"""Process entry points for ToolKeeper."""
