"""Application layer: tool registry, resources, server assembly and startup checks."""
