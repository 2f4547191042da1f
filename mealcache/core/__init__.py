"""
Core configuration and logging setup.
"""
