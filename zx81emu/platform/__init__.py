"""pygame window and input handling."""
