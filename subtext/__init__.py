"""
subtext — chat transcript parsing and relationship-safety classification.
"""

__version__ = '1.0.0'
