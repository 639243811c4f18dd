"""systems package – Pattern catalog and combat resolution."""
