"""
Candidate database model.

One row per ingested resume: the identity fields and keyword matches found
in the document, the full extracted text, and the name of the CV file in
the upload directory.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, func
from cvintake.core.database import Base


class Candidate(Base):
    """
    A candidate created from an uploaded resume.

    Only the ingestion pipeline creates rows. The filename resolver may later
    retarget cv_filename when the recorded file is missing from disk.
    """
    __tablename__ = "candidates"

    id = Column(Integer, primary_key=True, index=True)

    # Extracted identity ("N/A" when a field could not be found)
    name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)

    # Comma-joined keyword matches
    skills = Column(Text, nullable=True)
    languages = Column(Text, nullable=True)

    full_text = Column(Text, nullable=True)

    # File in the upload directory (nullable: no CV stored)
    cv_filename = Column(String, nullable=True)

    upload_date = Column(DateTime(timezone=True), server_default=func.now())
