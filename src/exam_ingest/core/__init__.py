"""Reconciliation pipeline: collection, selection, relocation and reporting."""
