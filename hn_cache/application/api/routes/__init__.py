"""
API route modules: health and content.
"""
