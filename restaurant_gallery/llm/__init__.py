"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Ask the model for restaurant recommendations as structured JSON.
- Graceful fallback when the LLM is unavailable or returns invalid output.
"""
