"""Application orchestration layer.

Coordinates configuration, composition of collaborators, the request
pipeline and the startup sequence.
"""

from . import config

__all__ = ["config"]
