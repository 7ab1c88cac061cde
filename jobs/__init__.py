"""Background worker: dramatiq broker, actors and task helpers."""
