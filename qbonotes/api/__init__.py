"""HTTP API for qbonotes."""
