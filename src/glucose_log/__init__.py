"""
Glucose Log - Personal blood-glucose tracking system.

A local, single-user log for recording blood-glucose measurements,
summarising and charting trends, and asking an AI assistant about them.
"""

__version__ = "0.1.0"
