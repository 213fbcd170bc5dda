"""Dear PyGui front end."""
