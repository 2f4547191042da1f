"""
Infrastructure adapters implementing the cache store contract.
"""
