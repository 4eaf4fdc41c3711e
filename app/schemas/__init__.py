"""
Schemas module - Request/Response schemas for API endpoints.

Difference from services:
- Services: MongoDB documents (plain dicts)
- Schemas: API contract (what client sends/receives) plus the
  value types passed to the match scorer and resume extractor
"""
