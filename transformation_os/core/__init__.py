"""Settings, logging and the capability model."""
