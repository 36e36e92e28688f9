"""NSW Explorer: interest-driven journey generation around Sydney."""
