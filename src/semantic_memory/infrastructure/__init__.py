"""Infrastructure adapters implementing the domain ports."""
