"""Domain services: fee math, CSV ingestion, import merging and aggregation."""
