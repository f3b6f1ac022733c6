"""
poe2filter - Path of Exile 2 item filter updater

Downloads community item filters from GitHub releases or branches into the
game's data directory, skipping sources that have not changed.
"""

__version__ = "0.2.0"

__all__ = ["__version__"]
