"""Pre-primary student record system for a Nepali school.

Tracks Nursery, LKG and UKG students, their progress assessments and
teaching plans, with a FastAPI web API, PDF/Excel reports and AI activity
suggestions.
"""

__version__ = "0.1.0"
