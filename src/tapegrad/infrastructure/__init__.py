"""
NumPy-backed implementation of tensors, tapes and operations.
"""
