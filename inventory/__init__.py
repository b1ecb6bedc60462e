"""inventory/ -- Inventory records, list queries, and the inventory service.

Layer rule: inventory/ imports from core/ and auth/ only. It does NOT import
from api/.
"""
