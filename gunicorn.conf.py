"""
Gunicorn configuration for the DailyFlow API.

Env vars that override defaults:
  PORT     — TCP port to bind (default: 4000)
  WORKERS  — number of worker processes (default: 2)
"""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '4000')}"

workers = int(os.environ.get("WORKERS", "2"))

# Uvicorn's ASGI event loop inside Gunicorn's process manager.
worker_class = "uvicorn.workers.UvicornWorker"

keepalive = 5
timeout = 120

# stdout only; the platform collects it.
loglevel = "info"
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sµs'

# Wait up to 30 s for in-flight requests on restart.
graceful_timeout = 30
