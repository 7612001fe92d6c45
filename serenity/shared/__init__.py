"""Code shared by all serenity services: models, store access, utilities."""
