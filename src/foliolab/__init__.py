"""Portfolio summaries for GitHub repositories."""
