"""Request dependencies: the session guard for pages and the API auth gate."""
