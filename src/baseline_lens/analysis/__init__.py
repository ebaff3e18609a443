"""Analysis pipeline — discovery, detection, resolution, classification."""
