"""Core types shared across the Graphify client."""
