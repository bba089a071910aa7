"""
EcoAudit - API Routers
"""
