"""HTTP API for the payroll export engine."""
