"""Server-side chat proxy for OpenAI and Ollama upstreams."""
