"""Web surface for live workspace search."""
