"""Face registry: JSON-file CRUD store plus descriptor matching."""
