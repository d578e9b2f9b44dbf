import os

# Gunicorn configuration file
# https://docs.gunicorn.org/en/stable/configure.html#configuration-file
# Run with: gunicorn -c gunicorn_config.py cron_server:app

# Server socket
bind = os.getenv("CRON_BIND", "0.0.0.0:5000")
backlog = 64

# A single sync worker: one cron call per day, the run is sequential.
workers = int(os.getenv("CRON_WORKERS", "1"))
worker_class = "sync"
timeout = 300
keepalive = 2

# Logging
accesslog = "-"
errorlog = "-"
loglevel = "info"

# Process naming
proc_name = "voucher_reminders_cron"
