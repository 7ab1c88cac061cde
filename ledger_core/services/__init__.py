"""
Business logic services.

Import concrete services from their subpackages.
"""
