"""Domain layer: order drafts and the order validation engine."""
