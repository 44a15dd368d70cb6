"""Domain services for MyUMC."""
