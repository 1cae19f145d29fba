"""Output sink for PRINT."""
