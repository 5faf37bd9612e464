"""HOMEase AI home safety assessment functions.

Firebase Cloud Functions that turn home photos and intake-wizard data into a
HUD OAHMP style home safety assessment and PDF report.
"""
