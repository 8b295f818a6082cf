"""
Permission bitmask codec, ACE snapshots and permission state classification.
"""
