"""
Fallback version module populated by hatch-vcs during builds.

Source checkouts without a tag keep this default.
"""

__version__ = "0.0.0+local"
