import multiprocessing
import os

# Gunicorn Production Configuration
bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# Checkout evaluation is CPU-bound and stateless; one worker per core plus one,
# with a couple of threads to cover the catalog query
workers = int(os.environ.get('GUNICORN_WORKERS', multiprocessing.cpu_count() + 1))
threads = 2
worker_class = 'gthread'

timeout = 30
graceful_timeout = 20
max_requests = 1000
max_requests_jitter = 100
keepalive = 5

# Logging
accesslog = '-'
errorlog = '-'
loglevel = os.environ.get('GUNICORN_LOG_LEVEL', 'info')
capture_output = True
