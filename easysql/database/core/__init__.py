"""
Core operations: the `TransactionRunner`.
"""
