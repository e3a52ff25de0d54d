"""
Contact Intelligence

Enriches CRM sales contacts with company and contact facts gathered from
external search providers, merges them under source precedence, and turns
the result into personalized product recommendations.
"""

__version__ = "0.1.0"
