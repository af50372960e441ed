"""Request handling use-cases built on the pure domain helpers."""
