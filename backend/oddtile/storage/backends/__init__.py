"""Statistics storage backends."""
