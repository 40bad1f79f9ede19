"""
Provider dataset layer.

Responsibilities:
- Describe the persisted per-provider JSON shape.
- Load and validate aws / azure / gcp records from the data directory.
- Expose them to the engine as an ordered, read-only mapping.
"""
