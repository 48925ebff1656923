"""Résumé screening core: processing pipeline and scoring engine."""
