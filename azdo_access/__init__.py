"""
Azure DevOps identity resolution and permission translation.
"""
