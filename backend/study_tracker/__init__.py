"""Application package for the study tracker backend.

This package exposes the repository, model and schema modules used by
the FastAPI application. Every resource is stored per user; the owner is
taken from the ``user-id`` request header.
"""
