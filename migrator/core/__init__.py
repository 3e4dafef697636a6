"""Pipeline context and error hierarchy."""
