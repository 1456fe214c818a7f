"""Commands module for autoservice CLI."""
