"""Mock OpenAI-compatible inference endpoint with synthetic failure injection."""
