"""Infrastructure adapters: persistence, outbound HTTP and observability."""
