"""For You feed ranking service."""
