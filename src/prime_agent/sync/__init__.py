"""Two-way sync between the skills directory and the AGENTS document."""
