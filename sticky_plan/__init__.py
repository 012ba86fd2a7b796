"""
sticky_plan - Floating day-planner sticky notes for the terminal

Each note group lives in its own Textual window process, holding day-keyed
notes and checklists plus a date-less "forever" backlog. A single store-owner
process persists every group and serves the window processes over a local
request/response channel.
"""

__version__ = "0.1.0"

# Version tuple for programmatic comparison
VERSION_TUPLE = (0, 1, 0)

__all__ = [
    "__version__",
    "VERSION_TUPLE",
]
