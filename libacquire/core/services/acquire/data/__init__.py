"""
L0 Data — static tables for the acquisition service.

Pure data. No logic. No imports beyond stdlib.
"""
