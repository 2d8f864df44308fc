"""Gunicorn config for the cash-flow dashboard API.

Run with: gunicorn cashflow.main:app -c gunicorn.conf.py
"""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# Each worker holds its own ledger snapshot and auto-refresh thread.
worker_class = "uvicorn.workers.UvicornWorker"
workers = int(os.environ.get("WEB_CONCURRENCY", "2"))

# PDF/Excel exports of the full ledger
timeout = 120

graceful_timeout = 30

keepalive = 65

accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("CASHFLOW_LOG_LEVEL", "info").lower()
