"""Element and nuclide reference data."""
