"""Tests for the stream monitor."""
