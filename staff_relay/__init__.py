"""Staff Contact Relay: public contact form that relays messages to staff by opaque identifier."""

__version__ = "1.0.0"
