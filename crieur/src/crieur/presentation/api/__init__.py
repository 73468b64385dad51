"""
HTTP and WebSocket API for Crieur.
"""
