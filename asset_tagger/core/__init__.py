"""
Core tagging logic - UI-agnostic.

Holds the data model, the editing session controller and the
collaborator contracts (storage, asset discovery, tag vocabulary).
"""
