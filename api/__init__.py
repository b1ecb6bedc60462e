"""api/ -- HTTP surface (FastAPI). The only layer that wires auth/ and inventory/ together."""
