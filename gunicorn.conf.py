"""
Gunicorn configuration for production deployment.

The deadline-reminder scheduler runs inside each worker that has
REMINDERS_ENABLED=true, so run reminders with a single worker (or in a
separate one-worker deployment) to avoid duplicate emails.
"""
import os

# Server socket
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
backlog = 2048

# Worker processes
workers = int(os.getenv("GUNICORN_WORKERS", 2))
worker_class = "uvicorn.workers.UvicornWorker"
worker_connections = 100

# Worker lifecycle
max_requests = 1000  # Restart worker after 1000 requests (prevent memory leaks)
max_requests_jitter = 100  # Add randomness to prevent all workers restarting at once

# Timeouts
timeout = 30
keepalive = 5
graceful_timeout = 30  # Lets an in-flight reminder cycle finish on shutdown

# Process naming
proc_name = "job_tracker_api"

# Server mechanics
daemon = False  # Don't run as daemon (Docker handles this)
pidfile = None
umask = 0
user = None
group = None
tmp_upload_dir = None

# Logging
accesslog = "-"  # Log to stdout
errorlog = "-"   # Log to stderr
loglevel = os.getenv("LOG_LEVEL", "info").lower()
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'


def _reminders_enabled() -> bool:
    return os.getenv("REMINDERS_ENABLED", "false").strip().lower() in ("1", "true", "yes")


# Server hooks
def on_starting(server):
    """Called just before the master process is initialized."""
    server.log.info("Starting Gunicorn server")


def when_ready(server):
    """Called just after the server is started."""
    server.log.info("Gunicorn server is ready. Spawning workers")
    if _reminders_enabled() and workers > 1:
        server.log.warning(
            "REMINDERS_ENABLED with %s workers: every worker runs the reminder "
            "scheduler and reminders will be sent more than once",
            workers,
        )


def worker_int(worker):
    """Called when a worker receives the SIGINT or SIGQUIT signal."""
    worker.log.info("Worker received INT or QUIT signal")


def worker_abort(worker):
    """Called when a worker is aborted."""
    worker.log.info("Worker received SIGABRT signal")
