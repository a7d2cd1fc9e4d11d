"""promptgen - versioned prompt templates from the command line.

Store named templates containing an ``<input>`` placeholder, fill them in
from inline text, the clipboard or your editor, and copy the result back to
the clipboard. Every update keeps the previous version around.
"""

__version__ = "0.3.0"
