"""
Utilities - response envelope and small shared helpers.
"""
