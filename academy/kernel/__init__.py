"""
Kernel layer: models, record store, audit events and identity.
"""
