"""
Utility helpers shared across the engine and the CLI.
"""
