"""HTTP layer: admin-gated ingestion endpoints and the read API."""
