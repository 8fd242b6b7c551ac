"""askline - terminal question/answer widget with inline notes."""

__version__ = "0.1.0"
