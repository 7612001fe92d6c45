"""Serenity service packages: one Flask blueprint per service."""
