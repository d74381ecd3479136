"""
Restaurant recommendations with photographs.

Responsibilities:
- Serve a curated list of featured restaurants, each with resolved images.
- Turn chat messages into LLM-generated recommendations with images.
- Cache the assembled featured list so repeated page loads cost no quota.
"""
