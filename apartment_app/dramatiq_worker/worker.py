"""Worker entrypoint that also runs the periodic jobs.

    dramatiq dramatiq_worker.worker --processes 1

Start exactly one process from this module; extra workers should load
``dramatiq_worker.dramatiq_app`` so the sweep is not scheduled twice.
"""

import logging

from core.settings import settings
from dramatiq_worker.dramatiq_app import dramatiq_app

logging.basicConfig(level=settings.LOG_LEVEL)

dramatiq_app.connect()
dramatiq_app.start_scheduler()

broker = dramatiq_app.broker
