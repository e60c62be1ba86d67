"""Test suite for choreo."""
