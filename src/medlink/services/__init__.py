"""Services package - Business logic layer.

Process-wide clients (Gemini, Mapbox geocoding, blob storage) are exposed
through ``get_*`` factories in their own modules so that FastAPI can
override them per test.
"""
