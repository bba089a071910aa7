"""
EcoAudit - Community Facility Environmental Audits

Records structured waste-audit responses for community facilities and
derives scores, quick wins and recommendations from them.
"""

__version__ = "0.1.0"
