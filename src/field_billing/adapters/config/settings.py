"""
Configuração lida do ambiente (ou de um `.env`) via python-decouple.
Todos os valores têm default para que o módulo possa ser importado sem `.env`.
"""
from decouple import config

# ───────────────────────── banco externo (PostgREST) ─────────────────────────
RECORD_STORE_URL = config("RECORD_STORE_URL", default="http://localhost:54321")
RECORD_STORE_KEY = config("RECORD_STORE_KEY", default="")
RECORD_STORE_TIMEOUT = config("RECORD_STORE_TIMEOUT", default=10.0, cast=float)
RECORD_STORE_RETRIES = config("RECORD_STORE_RETRIES", default=3, cast=int)
RECORD_STORE_PAGE_SIZE = config("RECORD_STORE_PAGE_SIZE", default=1000, cast=int)

INSTALLMENTS_TABLE = config("INSTALLMENTS_TABLE", default="BANCO_DADOS")
VISITS_TABLE = config("VISITS_TABLE", default="scheduled_visits")
USERS_TABLE = config("USERS_TABLE", default="users")
COLLECTOR_STORES_TABLE = config("COLLECTOR_STORES_TABLE", default="collector_stores")

# ───────────────────────── regras de negócio ─────────────────────────
ASSIGNMENT_BATCH_SIZE = config("ASSIGNMENT_BATCH_SIZE", default=200, cast=int)
CANCELLATION_HISTORY_DAYS = config("CANCELLATION_HISTORY_DAYS", default=30, cast=int)

# ───────────────────────── logging ─────────────────────────
LOG_LEVEL = config("LOG_LEVEL", default="INFO")
JSON_LOGS = config("JSON_LOGS", default=False, cast=bool)
