"""Shared cross-cutting helpers: telemetry and small utilities. No business logic."""
