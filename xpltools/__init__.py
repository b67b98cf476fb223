"""Code-generation tools for the ExpL and SPL languages targeting the XSM machine."""

__version__ = "0.1.0"