"""
Core module - configuration, logging, authentication and error handling.
"""
