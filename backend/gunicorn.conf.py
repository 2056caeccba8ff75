import multiprocessing

bind = "0.0.0.0:8000"
wsgi_app = "unit_economics.main:app"
workers = multiprocessing.cpu_count()
worker_class = "uvicorn.workers.UvicornWorker"
max_requests = 1000
max_requests_jitter = 50
# LLM calls are capped at 60s, leave headroom for the rest of the request
timeout = 90
keepalive = 5
accesslog = "-"
errorlog = "-"
loglevel = "info"
