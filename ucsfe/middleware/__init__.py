"""WSGI middleware: JSON error envelopes, exception recovery and trace context."""