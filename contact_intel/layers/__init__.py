"""
Pipeline layers: pattern extraction, search providers, structured
refinement and the CRM collaborator.
"""
