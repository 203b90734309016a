"""HTTP and RPC transport."""
