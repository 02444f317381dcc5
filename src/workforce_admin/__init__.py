"""Workforce Admin package.

This package is organized by feature modules (profiles, working_hours, rosters,
payroll, banking, ...) with a thin Flask controller layer on top of
service/repository layers.
"""
