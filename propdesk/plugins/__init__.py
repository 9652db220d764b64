"""Built-in propdesk plugins."""
