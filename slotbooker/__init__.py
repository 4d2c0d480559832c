"""
slotbooker - find and book shared time slots for two calendar users.
"""

__version__ = "0.1.0"
