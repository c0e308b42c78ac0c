"""
Utilities: exceptions, validators, schemas.
"""
