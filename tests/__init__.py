"""Tests for rill."""
