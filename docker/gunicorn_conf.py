import multiprocessing
import os

# JSON stores are file-locked, so several workers can share DATA_DIR.
bind = f"0.0.0.0:{os.getenv('PORT','8000')}"
workers = int(os.getenv("WEB_CONCURRENCY", str(min(4, multiprocessing.cpu_count())))) or 1
worker_class = "uvicorn.workers.UvicornWorker"
wsgi_app = "app.main:app"
timeout = int(os.getenv("TIMEOUT", "30"))
keepalive = 5
graceful_timeout = 30
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
