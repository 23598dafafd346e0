"""Infrastructure layer - database, logging and store API clients."""
