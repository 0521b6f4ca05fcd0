"""
Domain Layer - Core business rules and domain models.

This layer contains:
- Domain Models: Entities, value objects and the exception hierarchy
- Domain Interfaces: Abstract contracts (Ports) for the document and object stores
"""

from . import models
from . import interfaces

__all__ = [
    "models",
    "interfaces",
]
