"""
Celery Tasks

Task modules are listed in celery_app.conf.imports and loaded by the worker;
importing them builds the Flask app, so nothing is imported here.
"""
