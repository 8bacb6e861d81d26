"""Daily report aggregation, delivery and scheduling."""
