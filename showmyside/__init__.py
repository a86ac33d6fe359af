"""A networked lobby game with enciphered XML events, played from the console."""

__version__ = "0.1.0"
__all__ = ["__version__"]