"""
Security: credential verification.
"""
