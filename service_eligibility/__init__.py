"""
Eligibility Service.
"""
