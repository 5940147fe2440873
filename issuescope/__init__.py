"""issuescope - Locate the code relevant to an issue report.

Ranks files, symbols and API surfaces of a workspace against a
natural-language problem report, with optional model-assisted judgment.
"""

__version__ = "0.3.0"
__all__ = ["__version__"]
