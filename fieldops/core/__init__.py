"""Core wiring: settings, lifespan, exception handlers, rate limiter."""
