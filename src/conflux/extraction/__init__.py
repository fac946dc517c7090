"""AI-powered entity extraction using Mistral.

Provides Pydantic validation models for extracted mentions, the
Mistral API client wrapper, prompt construction, and response parsing.
"""
