"""
EcoAudit - Utilities Package
"""
