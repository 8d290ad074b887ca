"""caller — async JSON-RPC client."""
