"""Print sheet layout and PDF assembly."""
