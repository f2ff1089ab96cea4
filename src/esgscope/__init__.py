"""ESGScope: company ESG data, repositories and AI tool dispatch."""
