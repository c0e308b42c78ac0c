"""
Infrastructure: database sessions and room naming.
"""
