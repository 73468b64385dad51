"""
Domain layer: entities, value objects and exceptions.
"""
