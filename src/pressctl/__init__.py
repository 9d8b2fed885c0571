"""pressctl: multi-author publishing core with policy-gated workflows."""

__version__ = "0.3.0"
