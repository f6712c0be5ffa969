"""Provider clients and helpers shared across Blog Scout."""
