"""
L0 Data — static tables.
"""
