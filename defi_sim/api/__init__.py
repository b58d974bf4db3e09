"""HTTP surface consumed by the dashboard UI."""
