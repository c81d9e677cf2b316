"""Terminal presentation for LiveScribe."""
