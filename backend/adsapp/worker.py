# backend/adsapp/worker.py

"""
Celery worker and beat entry point.
Importing the tasks module registers the @task decorators, including the
periodic invitation expiry sweep.
"""

from adsapp.core.celery_app import celery_app

import adsapp.background.tasks
