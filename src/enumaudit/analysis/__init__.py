"""Controller/action classification, enum discovery, and report aggregation."""
