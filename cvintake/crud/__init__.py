"""
CRUD operations (Create, Read, Update, Delete) for database models.

This layer provides a clean separation between the services/API routes and
database operations, following the Repository pattern.
"""

from cvintake.crud import candidate

__all__ = ["candidate"]
