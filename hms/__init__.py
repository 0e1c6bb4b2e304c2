"""Django project package for the HMS inpatient backend."""
