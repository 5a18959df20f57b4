# This project was developed with assistance from AI tools.
"""Education-loan case workflow API."""

__version__ = "0.1.0"
