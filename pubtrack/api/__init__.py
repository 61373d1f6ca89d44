"""HTTP adapters (Flask blueprints and error handlers) around the core engine."""
