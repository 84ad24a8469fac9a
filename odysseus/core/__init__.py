"""Cross-cutting configuration, logging, metrics and security."""
