"""Infrastructure adapters: logging and document stores."""
