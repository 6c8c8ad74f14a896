"""Lifecycle policies for dashboard entities."""
