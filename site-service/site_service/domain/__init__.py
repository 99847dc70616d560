"""
Domain layer - listing entities and repository contracts
"""
