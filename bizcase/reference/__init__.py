"""
Static reference data consumed read-only by the calculation engine.
"""
