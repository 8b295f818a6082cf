"""
Configuration, errors, collaborator interfaces and the REST client.
"""
