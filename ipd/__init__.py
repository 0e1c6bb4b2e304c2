"""Inpatient department (IPD) application.

Wards, beds, admissions and the billing preview that prices an
inpatient stay, exposed as a JSON API for the desktop front-end.
"""
