"""WSGI middleware, logging, models, Kafka settings and helpers for a self-service password reset front end."""

__version__ = "0.1.0"