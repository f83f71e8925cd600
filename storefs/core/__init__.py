"""Core helpers shared by the storage backends."""
