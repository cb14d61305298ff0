"""Health centre member registry.

The domain package holds the member record, its validation rules and the
blood-pressure classification. The services package owns the in-memory
registry and the persistence boundary.
"""
