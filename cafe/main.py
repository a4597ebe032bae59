# cafe/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cafe.middleware import RequestIdMiddleware
from cafe.db import Base, engine
from cafe.config import settings
from cafe.util.logs import configure_logging
import cafe.models  # noqa: F401  (registers tables)

from cafe.routers import admin, auth, billing, customers, menu, orders

configure_logging()

app = FastAPI(title="Cafe Billing API", version="0.1.0")

@app.on_event("startup")
def init_db():
    Base.metadata.create_all(bind=engine)

# Middlewares
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(admin.router)
app.include_router(auth.router)
app.include_router(billing.router)
app.include_router(menu.router)
app.include_router(orders.router)
app.include_router(customers.router)

@app.get("/healthz")
def healthz():
    return {"ok": True}
