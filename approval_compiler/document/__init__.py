"""Letter rendering and drawing surfaces."""
