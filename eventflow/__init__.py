"""Event approval workflow backend."""
