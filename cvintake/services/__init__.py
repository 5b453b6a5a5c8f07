"""
Resume ingestion and reconciliation services.

- text_extractor: file -> raw text
- field_extractor: raw text -> ExtractedFields
- filename_resolver: stored filename derivation and repair
- ingestion: the pipeline tying them together
- keyword_scan: keyword ranking over stored candidates
"""
