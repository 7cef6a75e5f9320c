"""TMDb catalog connector: client, payload models and discover parameters."""
