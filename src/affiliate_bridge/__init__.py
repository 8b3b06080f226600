"""Nuvemshop <-> GoAffPro affiliate attribution bridge."""

__version__ = "0.1.0"
