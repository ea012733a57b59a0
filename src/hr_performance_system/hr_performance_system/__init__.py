"""HR Performance System package.

This package is organized by feature modules (performance, attendance, charges, ...)
with a thin Flask controller layer and service/repository layers underneath.
"""
