"""HRM System package.

This package is organized by feature modules (employees, attendance, leaves,
payroll) with a thin Flask controller layer over service/repository layers.
"""
