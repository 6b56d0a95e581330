"""Service layer — introspection, rule evaluation, and dispatch.

Services may import from the domain layer and from plugins.
They must never import from commands or output.
"""
