"""Tests for Gemini Search."""
