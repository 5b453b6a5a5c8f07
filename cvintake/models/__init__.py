"""
Database models package.
"""

from cvintake.models.candidate import Candidate

__all__ = ["Candidate"]
