"""Project scaffolding: templates and the generator behind ``starpin init``."""
