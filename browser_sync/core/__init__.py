"""
Coordination core: presence, election and shared state
"""
