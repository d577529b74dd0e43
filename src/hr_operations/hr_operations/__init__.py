"""HR operations package.

Organized by feature modules (holidays, balances, attendance, leave, payroll, ...)
with a thin Flask controller layer over service/repository layers.
"""
