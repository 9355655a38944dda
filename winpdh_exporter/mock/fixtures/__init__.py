"""JSON fixture catalogs for the mock counter provider."""
