"""
Pydantic schemas for extraction results and Candidate API responses.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

# Placeholder stored when a field cannot be extracted
NOT_AVAILABLE = "N/A"


class ExtractedFields(BaseModel):
    """Structured fields parsed out of a resume's text."""
    name: str = Field(NOT_AVAILABLE, description="Candidate name")
    email: str = Field(NOT_AVAILABLE, description="First email address found")
    phone: str = Field(NOT_AVAILABLE, description="Phone in +<country code><number> form")
    skills: str = Field(NOT_AVAILABLE, description="Comma-joined skill keywords, table order")
    languages: str = Field(NOT_AVAILABLE, description="Comma-joined spoken languages, table order")


class CandidateUploadResponse(BaseModel):
    """Response after uploading and ingesting a resume."""
    candidate_id: int
    cv_filename: str
    fields: ExtractedFields
    message: str


class CandidateResponse(BaseModel):
    """Full candidate record."""
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    skills: Optional[str] = None
    languages: Optional[str] = None
    full_text: Optional[str] = Field(None, description="Extracted resume text")
    cv_filename: Optional[str] = None
    upload_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class CandidateListResponse(BaseModel):
    """Simplified candidate info for list endpoints."""
    id: int
    name: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    skills: Optional[str]
    languages: Optional[str]
    cv_filename: Optional[str]
    upload_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class KeywordMatch(BaseModel):
    """One candidate's result in a keyword scan."""
    id: int
    name: Optional[str]
    email: Optional[str]
    score: int = Field(..., description="Share of keywords found, 0-100")
    match_count: int
    total_keywords: int
    cv_filename: Optional[str] = None


class KeywordScanResponse(BaseModel):
    """Keyword scan over all stored candidates."""
    keywords: list[str]
    results: list[KeywordMatch]
