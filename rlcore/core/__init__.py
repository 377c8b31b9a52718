"""Core contracts: step types, stacking, seeding, errors and the environment ABC."""
