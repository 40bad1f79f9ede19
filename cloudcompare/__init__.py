"""
Cloud platform comparison service.

Responsibilities:
- Load the AWS / Azure / GCP provider dataset.
- Turn user constraints into per-dimension weightings.
- Score every provider and derive neutral, constraint-specific narrative.
- Reject any output that reads like a single-choice recommendation.
"""

__version__ = "1.0.0"
