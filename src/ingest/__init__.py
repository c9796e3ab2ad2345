"""Data share ingestion.

This package reads stored documents, validates them into data shares,
and runs the per-metric batching pipeline.
"""
