"""gallerysync - compare CMS resource galleries between editing and public servers."""

__version__ = "0.1.0"
