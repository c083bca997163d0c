"""Cross-cutting infrastructure: errors and structured logging."""
