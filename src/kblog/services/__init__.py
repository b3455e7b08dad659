"""Service layer: CRUD services returning ResultEnvelope.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""
