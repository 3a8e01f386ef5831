"""
warfront-audio: background music and combat alert engine for the Warfront game.
"""

__version__ = "0.1.0"
