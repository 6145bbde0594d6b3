"""
Services layer - business logic for the metadata-to-report pipeline.

DESIGN PRINCIPLE:
- Services contain business logic, NOT routes
- External lookups (geocoding, plate OCR) never raise to the caller
- The report pipeline is the only place that sequences them
"""
