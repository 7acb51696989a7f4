"""
Gunicorn configuration for the Spendlist API.

Run with:
    gunicorn -c deployment/gunicorn_config.py "app:create_app('production')"
"""
import multiprocessing
import os

APP_HOME = os.environ.get('SPENDLIST_HOME', '/srv/spendlist')

# Server Socket
bind = os.environ.get('SPENDLIST_BIND', '127.0.0.1:3001')
backlog = 2048

# Worker Processes
workers = int(os.environ.get('SPENDLIST_WORKERS', multiprocessing.cpu_count() * 2 + 1))
worker_class = 'sync'
max_requests = 1000
max_requests_jitter = 50
# Longer than the database connect and pool timeouts so a slow store
# surfaces as a 503 from the app rather than a killed worker.
timeout = 30
keepalive = 5

# Logging
accesslog = os.path.join(APP_HOME, 'logs', 'gunicorn_access.log')
errorlog = os.path.join(APP_HOME, 'logs', 'gunicorn_error.log')
loglevel = 'info'
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s %(D)s'

# Process Naming
proc_name = 'spendlist-api'

# Server Mechanics
daemon = False
pidfile = os.path.join(APP_HOME, 'gunicorn.pid')
umask = 0o007

# Security
limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190


def post_fork(server, worker):
    server.log.info("Worker spawned (pid: %s)", worker.pid)


def when_ready(server):
    server.log.info("Spendlist API ready on %s", bind)


def worker_abort(worker):
    """Called when a worker times out, usually a request stuck on the database."""
    worker.log.warning("Worker %s aborted after %ss timeout", worker.pid, timeout)
