"""
Code Prompt - consolidate a source tree into one prompt-ready text file.

This package walks a directory tree, selects files using include/exclude
patterns and .gitignore-style rules, optionally strips comments and empty
lines or numbers the lines, and writes every selected file behind a fenced
header into a single document for use with large language models.
"""

__version__ = "0.3.0"
__author__ = "Code Prompt Team"
