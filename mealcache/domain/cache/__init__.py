"""
Cache Domain Module

Value objects, schemas, exceptions, store contract and domain services
for the read-through cache.
"""
