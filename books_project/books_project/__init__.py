# Celery instance is defined in books_project/celery.py
# Importing it here makes sure the app is loaded whenever Django starts,
# so @shared_task functions bind to it
from .celery import celery_app

__all__ = ("celery_app",)

""" Run workers with "celery -A books_project worker -l info".
    -A books_project imports books_project/__init__.py,
    which exposes celery_app. """
