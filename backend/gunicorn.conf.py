import os

# App
wsgi_app = "devit:create_app()"

# Bind & workers; each request runs on its own worker thread with its own DB session
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
threads = int(os.getenv("GUNICORN_THREADS", "4"))
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr (collected by Docker)
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

# Honour proxy headers; ProxyFix in the app does the rest
forwarded_allow_ips = "*"
proxy_protocol = False
