"""Batch output storage.

This package encodes packet and header files and writes them
to local or S3 destinations.
"""
