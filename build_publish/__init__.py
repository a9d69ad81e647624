"""Build tag, version and changelog resolution for build variants."""
