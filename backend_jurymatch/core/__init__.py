"""
Core utilities shared by identity resolution and persona classification.
"""
