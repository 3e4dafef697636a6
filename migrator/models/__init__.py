"""Source resource model and target messaging model."""
