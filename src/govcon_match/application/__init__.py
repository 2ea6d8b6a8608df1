"""Application services: reference data loading, scoring, explain, batch."""
