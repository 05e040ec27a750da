"""Find, remove and reinstall Playwright for Node.js on macOS."""

__version__ = "1.0.0"
