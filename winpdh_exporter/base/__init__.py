"""Base layer: contracts, errors, logging, stop signal and registry glue."""
