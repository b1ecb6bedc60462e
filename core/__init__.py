"""core/ -- Kernel: configuration, error taxonomy, database helpers.

Layer rule: core/ has no reverse dependencies on auth/, inventory/, or api/.
"""
