"""Infrastructure: persistence, cache, security and service adapters."""
