"""Infrastructure Layer — database session management and logging setup.

Invariants:
    - Only shell code (api/, services/) imports from here; core/ never does
"""
