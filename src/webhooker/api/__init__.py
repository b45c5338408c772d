"""HTTP control surface for the relay."""
