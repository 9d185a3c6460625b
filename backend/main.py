import os
from dotenv import load_dotenv
load_dotenv()  # before any punchclock import reads its settings

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from punchclock.db import get_store, init_db
from punchclock.middleware.error_handler import ErrorHandlerMiddleware, register_error_handlers
from punchclock.middleware.rate_limiter import RateLimiterMiddleware
from punchclock.routes import auth, dashboard, employees, health, overtime, password_setup, punches, reports
from punchclock.seed.seed_loader import seed_demo_accounts
from punchclock.services.token_cleanup import start_token_cleanup, stop_token_cleanup

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("punchclock")


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = get_store()
    if hasattr(store, "init_indexes"):
        await store.init_indexes()
    if os.getenv("SEED_DEMO_ACCOUNTS", "false").lower() == "true":
        await seed_demo_accounts(store)
    await start_token_cleanup()
    logger.info("Punchclock API started")
    yield
    await stop_token_cleanup()
    logger.info("Punchclock API stopped")


app = FastAPI(
    title="Punchclock API",
    description="Employee attendance: clock-in/clock-out punches, worked hours and overtime approval",
    version="1.0.0",
    lifespan=lifespan,
)

# Starlette runs the last-added middleware outermost: CORS wraps the rate
# limiter, which wraps the catch-all error handler, so 429s and 500s still
# carry CORS headers.
app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(RateLimiterMiddleware)

# allow_credentials=True needs an explicit origin list (comma-separated in CORS_ORIGINS)
cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_error_handlers(app)

init_db(app)

API_ROUTERS = [
    (auth.router, "/api/auth", "Authentication"),
    (punches.router, "/api/punches", "Punches"),
    (punches.admin_router, "/api/admin/punches", "Punches"),
    (reports.router, "/api/reports", "Reports"),
    (overtime.router, "/api/overtime", "Overtime"),
    (password_setup.router, "/api/password-setup", "Password Setup"),
    (employees.router, "/api/employees", "Employees"),
    (dashboard.admin_router, "/api/admin/dashboard", "Dashboard"),
    (dashboard.employee_router, "/api/employee/dashboard", "Dashboard"),
]

app.include_router(health.router, tags=["Health"])
for router, prefix, tag in API_ROUTERS:
    app.include_router(router, prefix=prefix, tags=[tag])


@app.get("/")
async def root():
    return {"message": "Punchclock API", "docs": app.docs_url, "health": "/health"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
