"""Info-Hub: typed content tiles published as one static HTML page."""

__version__ = "0.1.0"
