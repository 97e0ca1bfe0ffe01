"""Class Manager package.

Feature modules (students, classes, attendance, payments, exams, tokens, users)
each keep a Protocol repository, a MySQL implementation, a service holding the
business rules and a thin Flask controller.
"""
