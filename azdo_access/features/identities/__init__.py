"""
Subject classification, identity search and graph subject resolution.
"""
