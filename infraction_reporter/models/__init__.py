"""
Pydantic models for request/response validation and pipeline records.

DESIGN PRINCIPLE:
- Models reflect data structure, not business logic
- Optional fields mean "not available", never an error
"""
