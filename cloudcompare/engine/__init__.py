"""
Constraint-weighted evaluation engine.

Responsibilities:
- Normalize raw constraints into a fixed-shape ``Constraint``.
- Compose per-dimension weightings from the rule table.
- Score each provider and derive constraint-specific narrative.
- Compare providers and bucket them into decision guidance.
- Reject structurally incomplete or non-neutral output.
- Memoize results per constraint fingerprint.
"""
