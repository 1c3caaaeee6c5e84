# Serve the SNS notification endpoint behind gunicorn, as: gunicorn drinksync.api:app -c gunicorn.conf.py
# Each worker starts its own AWS clients in the FastAPI lifespan.

# Workers
workers = 2
worker_class = 'uvicorn.workers.UvicornWorker'

# Socket
bind = '0.0.0.0:5000'

# SNS waits 15 seconds for a response before retrying the delivery
timeout = 15

# Logging
# loglevel = 'debug'
# accesslog = '/tmp/drinksync_access_log'
