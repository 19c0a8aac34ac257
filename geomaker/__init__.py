"""
Geomaker: interactive image-classification session orchestrator.

Ingests labeled image archives, drives a simulated training run with early
stopping, synthesizes cross-referenced evaluation artifacts and serializes the
whole session for export or for a conversational assistant.
"""

__version__ = "0.3.0"
