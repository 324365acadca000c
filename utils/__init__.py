"""
Shared helpers: logging setup and file-system utilities.
"""
