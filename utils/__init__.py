"""
Utilities Package for the Database Liveness Monitor

Logging setup and small time / error formatting helpers.
"""
