"""
Time-Travel State History Engine

Replayable, inspectable action history for any pure reducer.
"""

__version__ = "0.1.0"
