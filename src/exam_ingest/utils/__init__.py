"""Logging, environment and console helpers."""
