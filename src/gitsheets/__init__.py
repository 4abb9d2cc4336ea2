"""gitsheets.

Version control for spreadsheets: content-addressed integrity hashes and
structural diffs for CSV exports.
"""

__version__ = "0.3.0"
__author__ = "gitsheets contributors"

__all__ = []
