# Celery instance is defined in cm_project/celery.py
# It creates celery_app object and points it to Django settings
from .celery import celery_app

# 'from cm_project import *', only exports celery_app
__all__ = ("celery_app",)

""" When you run Celery workers, "celery -A cm_project worker -l info"
    imports cm_project/__init__.py, which exposes celery_app. """
