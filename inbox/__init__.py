"""Multi-agent WhatsApp inbox backend."""

__version__ = "1.0.0"
