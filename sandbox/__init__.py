"""Sandbox peer for the envelope API.

A FastAPI application that behaves like the legacy mobile backend: every
answer is HTTP 200 with a status envelope, and sign-in and profile requests
arrive as encrypted ``verificationCode`` payloads. Used by integration tests
and for local development (``uvicorn main:app``).
"""
