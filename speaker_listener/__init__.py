"""Speaker/listener referential-game environment core."""
