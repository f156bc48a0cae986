"""Local HTTP relay that prints station tickets on ESC/POS network printers."""

__version__ = "1.0.0"
